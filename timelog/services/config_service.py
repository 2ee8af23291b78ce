# timelog/services/config_service.py

from typing import Optional, Tuple
from sqlalchemy.orm import Session

from timelog.models.app_config import AppConfig, CONFIG_KEY, DEFAULT_MODEL
from timelog.schemas.config import ConfigResponse, ConfigUpdateRequest


class ProviderNotConfigured(Exception):
    pass


def get_config_row(db: Session) -> Optional[AppConfig]:
    return db.query(AppConfig).filter(AppConfig.key == CONFIG_KEY).first()


def get_access_token(db: Session) -> Optional[str]:
    row = get_config_row(db)
    if not row or not row.access_token:
        return None
    return row.access_token


def mask_key(key: Optional[str]) -> str:
    return "*" * len(key) if key else ""


def read_public_config(db: Session) -> ConfigResponse:
    row = get_config_row(db)

    if not row:
        return ConfigResponse(
            zhipu_model=DEFAULT_MODEL,
            zhipu_api_key="",
            zhipu_api_key_masked=False,
        )

    # access_token 은 절대 내려주지 않음
    return ConfigResponse(
        zhipu_model=row.zhipu_model or DEFAULT_MODEL,
        zhipu_api_key=mask_key(row.zhipu_api_key),
        zhipu_api_key_masked=bool(row.zhipu_api_key),
    )


def update_config(db: Session, payload: ConfigUpdateRequest) -> AppConfig:
    """Shallow merge: provided fields overwrite, omitted fields are kept."""
    row = get_config_row(db)
    if not row:
        row = AppConfig(key=CONFIG_KEY)
        db.add(row)

    provided = payload.model_dump(exclude_unset=True)

    if "zhipu_api_key" in provided and provided["zhipu_api_key"] is not None:
        row.zhipu_api_key = provided["zhipu_api_key"]
    # 빈 모델명은 무시
    if provided.get("zhipu_model"):
        row.zhipu_model = provided["zhipu_model"]
    if "access_token" in provided and provided["access_token"] is not None:
        row.access_token = provided["access_token"] or None

    db.commit()
    db.refresh(row)
    return row


def get_provider_settings(db: Session) -> Tuple[str, str]:
    row = get_config_row(db)

    if not row:
        raise ProviderNotConfigured(
            "AI configuration not found. Please configure API key in settings."
        )
    if not row.zhipu_api_key:
        raise ProviderNotConfigured(
            "Zhipu API key not configured. Please configure in settings."
        )

    return row.zhipu_api_key, row.zhipu_model or DEFAULT_MODEL
