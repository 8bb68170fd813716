"""Config flow for the Furniture Catalog."""

from __future__ import annotations

from typing import Any

import voluptuous as vol
from homeassistant import config_entries
from homeassistant.config_entries import ConfigFlowResult

from .const import (
    CONF_PAGE_SIZE,
    CONF_VARIANT,
    DEFAULT_PAGE_SIZE,
    DOMAIN,
    PAGE_SIZES,
    VARIANT_MAIN,
    VARIANTS,
)

STEP_USER_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_VARIANT, default=VARIANT_MAIN): vol.In(
            {key: variant.title for key, variant in VARIANTS.items()}
        ),
        vol.Optional(CONF_PAGE_SIZE, default=DEFAULT_PAGE_SIZE): vol.In(list(PAGE_SIZES)),
    }
)


class FurnitureCatalogConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for the Furniture Catalog."""

    VERSION = 1

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Handle the initial step.

        One entry per catalog variant.
        """
        if user_input is None:
            return self.async_show_form(step_id="user", data_schema=STEP_USER_SCHEMA)

        variant = VARIANTS[user_input[CONF_VARIANT]]
        await self.async_set_unique_id(variant.key)
        self._abort_if_unique_id_configured()

        return self.async_create_entry(
            title=variant.title,
            data={
                CONF_VARIANT: variant.key,
                CONF_PAGE_SIZE: user_input.get(CONF_PAGE_SIZE, variant.page_size),
            },
        )
