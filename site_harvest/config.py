"""
Модуль для загрузки и валидации конфигурации краулера SiteHarvest.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
import os
from pathlib import Path
from typing import Any, Optional, Tuple, Union
from urllib.parse import urlparse

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    ValidationError,
    field_validator,
)

from site_harvest.crawler.url_filter import DEFAULT_SKIP_EXTENSIONS
from site_harvest.errors import ConfigurationError

__all__ = ("CrawlConfig", "make_config", "load_config", "DEFAULT_USER_AGENT")

DEFAULT_USER_AGENT = "SiteHarvestBot/1.0"


class CrawlConfig(BaseModel):
    """Конфигурация одного задания обхода. Создаётся один раз и не меняется."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    seed_url: HttpUrl = Field(..., description="Корневой URL, с которого начинается обход.")
    max_pages: int = Field(50, ge=1, description="Жёсткий лимит на число загружаемых URL.")
    max_depth: int = Field(3, ge=0, description="Максимальная глубина обхода ссылок от seed.")
    fetch_timeout: float = Field(30.0, gt=0, description="Таймаут на один запрос (секунд).")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    concurrency: int = Field(10, ge=1, description="Макс. число одновременных загрузок.")
    site_id: Optional[str] = Field(None, min_length=1, description="Идентификатор владельца страниц.")
    min_content_chars: int = Field(100, ge=0, description="Минимальная длина текста страницы.")
    min_word_count: int = Field(20, ge=0, description="Минимальное число слов на странице.")
    max_body_bytes: int = Field(5 * 1024 * 1024, ge=1, description="Макс. размер тела ответа.")
    skip_extensions: Tuple[str, ...] = Field(
        DEFAULT_SKIP_EXTENSIONS, description="Расширения файлов, которые не обходятся."
    )
    follow_rejected_links: bool = Field(
        False, description="Переходить по ссылкам страниц, не прошедших фильтр контента."
    )

    @field_validator("skip_extensions", mode="before")
    def _normalize_extensions(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = [v]
        if isinstance(v, (list, tuple, set)):
            return tuple(
                (e if e.startswith(".") else f".{e}").lower() for e in (str(x).strip() for x in v) if e
            )
        return v

    @property
    def seed(self) -> str:
        """Seed URL как строка."""
        return str(self.seed_url)

    @property
    def owner_id(self) -> str:
        """Идентификатор, которым помечаются сохранённые страницы (по умолчанию хост seed)."""
        return self.site_id or (urlparse(self.seed).hostname or self.seed)


def make_config(**values: Any) -> CrawlConfig:
    """Создаёт CrawlConfig, превращая ошибки валидации в ConfigurationError."""
    try:
        return CrawlConfig(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"Некорректная конфигурация обхода: {exc}") from exc


_DEFAULT_CFG = Path("configs/default.yaml")


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень YAML должен быть mapping, получено {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON в {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Верхний уровень JSON должен быть mapping, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None], **overrides: Any) -> CrawlConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlConfig.
    Значения из overrides (не None) имеют приоритет над файлом.
    При отсутствии файла конфига бросает FileNotFoundError,
    при неверных значениях - ConfigurationError.
    """
    if path is None:
        if not _DEFAULT_CFG.exists():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(_DEFAULT_CFG))
        path_obj = _DEFAULT_CFG
    else:
        path_obj = Path(path).expanduser().resolve()
        if not path_obj.is_file():
            raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = _read_yaml(path_obj)
    elif suffix == ".json":
        data = _read_json(path_obj)
    else:
        raise ValueError(f"Неподдерживаемый формат конфига: {suffix}")

    data.update({k: v for k, v in overrides.items() if v is not None})
    return make_config(**data)
