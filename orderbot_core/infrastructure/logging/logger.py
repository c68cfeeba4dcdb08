import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from orderbot_core.config.settings import Settings, settings


LOGGER_NAME = "orderbot_core"


class JsonFormatter(logging.Formatter):
    def __init__(self, redact_content: bool = False):
        super().__init__()
        self._redact_content = redact_content

    def format(self, record: logging.LogRecord) -> str:
        msg = record.getMessage()
        if self._redact_content:
            msg = (msg or "")[:64]
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "msg": msg,
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info and record.exc_info[0] is not None:
            payload["exc_type"] = record.exc_info[0].__name__
        return json.dumps(payload, ensure_ascii=False, default=str)


def setup_logger(cfg: Optional[Settings] = None) -> logging.Logger:
    cfg = cfg or settings
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(cfg.log_level)
    log_dir = Path(cfg.log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = (log_dir / "orderbot.log").resolve()
    # 重复调用时只保留一个指向同一文件的 handler
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler) and Path(handler.baseFilename) == log_file:
            logger.removeHandler(handler)
            handler.close()
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(cfg.log_level)
    fh.setFormatter(JsonFormatter(redact_content=cfg.log_redact_content))
    logger.addHandler(fh)
    return logger


logger = setup_logger()
