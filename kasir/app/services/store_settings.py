from __future__ import annotations

from sqlalchemy.orm import Session

from kasir.app.models.setting import Setting

# Keys the receipt renderer understands; any other key is stored as-is.
RECEIPT_SETTING_KEYS: tuple[str, ...] = (
    "company_logo",
    "store_name",
    "store_address",
    "store_phone",
    "store_email",
    "store_website",
    "receipt_header",
    "receipt_footer",
    "payment_note_line1",
    "payment_note_line2",
)


def load_store_settings(db: Session) -> dict[str, str]:
    """Fold the settings table into a ``{key: value}`` map."""
    return {row.key: row.value for row in db.query(Setting).all()}


def upsert_setting(db: Session, key: str, value: str) -> Setting:
    """Create or overwrite one setting. Does NOT commit."""
    setting = db.query(Setting).filter(Setting.key == key).first()
    if setting:
        setting.value = value
    else:
        setting = Setting(key=key, value=value)
        db.add(setting)
    db.flush()
    return setting
