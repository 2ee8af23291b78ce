from sqlalchemy import Column, String, Text, DateTime, func
from timelog.database import Base

CONFIG_KEY = "app_config"
DEFAULT_MODEL = "glm-4"


class AppConfig(Base):
    # 단일 row 설정 (key 고정)
    __tablename__ = "app_config"

    key = Column(String(50), primary_key=True, default=CONFIG_KEY)

    zhipu_api_key = Column(Text, nullable=True)
    zhipu_model = Column(String(100), nullable=True)
    access_token = Column(String(255), nullable=True)

    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
