from timelog.timeline.slots import (
    SLOT_MINUTES,
    SLOTS_PER_DAY,
    TimeSlot,
    current_slot_start,
    format_date_key,
    generate_time_slots,
    previous_slot,
    slot_index,
)
from timelog.timeline.chain import (
    chain_followers,
    find_copy_source,
    has_content,
    resolve_activity,
    slot_range,
    slots_between,
)
