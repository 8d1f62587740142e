from typing import Any, Mapping

from ..config import Settings
from ..domain.errors import NotFoundError
from ..domain.repositories import SettingsRepository
from ..domain.settings import ReservationSettings, default_settings, merge_settings
from ..models import Unit


async def load_settings(
    settings_repo: SettingsRepository,
    *,
    unit_id: str,
    config: Settings,
) -> tuple[Unit, ReservationSettings]:
    unit = await settings_repo.get_unit(unit_id)
    if unit is None:
        raise NotFoundError("unit not found")
    document = await settings_repo.get_document(unit_id)
    defaults = default_settings(
        unit_id,
        window_from=config.default_window_from,
        window_to=config.default_window_to,
    )
    return unit, merge_settings(defaults, document)


async def replace_settings(
    settings_repo: SettingsRepository,
    *,
    unit_id: str,
    document: Mapping[str, Any],
    config: Settings,
) -> ReservationSettings:
    """Validate a settings document against the fixed field set, then store it."""
    unit = await settings_repo.get_unit(unit_id)
    if unit is None:
        raise NotFoundError("unit not found")
    defaults = default_settings(
        unit_id,
        window_from=config.default_window_from,
        window_to=config.default_window_to,
    )
    merged = merge_settings(defaults, document)
    await settings_repo.save_document(unit_id, document)
    return merged
