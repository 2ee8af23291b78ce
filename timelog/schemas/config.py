from typing import Optional

from timelog.schemas.entries import CamelModel


class ConfigUpdateRequest(CamelModel):
    zhipu_api_key: Optional[str] = None
    zhipu_model: Optional[str] = None
    access_token: Optional[str] = None


class ConfigResponse(CamelModel):
    zhipu_model: str
    zhipu_api_key: str          # 마스킹된 값 ("****")
    zhipu_api_key_masked: bool  # 키가 설정되어 있는지 여부
