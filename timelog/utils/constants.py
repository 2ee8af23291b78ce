# 시간 분포 카테고리 (AI 분석 결과 timeDistribution 의 key)
TIME_DISTRIBUTION_FIELDS = [
    "输入",
    "思考",
    "输出",
    "通勤",
    "吃饭",
    "休息",
    "其他",
]

# 기간 요약 (documents summary)
RANGE_30D = "30d"
RANGE_365D = "365d"
RANGE_DAYS = {
    RANGE_30D: 29,
    RANGE_365D: 364,
}
RANGE_LABELS = {
    RANGE_30D: "最近一个月",
    RANGE_365D: "最近一年",
}

SUMMARY_SECTIONS = ["总结", "洞察", "做得好的点", "改进建议"]

DOCUMENTS_DEFAULT_PAGE_SIZE = 20
DOCUMENTS_MAX_PAGE_SIZE = 50
