"""Category registry for the Furniture Catalog.

Maps each category key to its localized display name and, for a fixed set of
categories, to an accordion-style facet group. Every facet option names the
literal substrings that a product's display name must contain (any of them)
to pass the facet. The tokens are tied to real Arabic product names and keep
their exact spacing.

Registries are read-only and built once at import time. Variants that share a
catalog layout share a registry instance.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .const import ALL, LANG_AR, LANG_EN, VARIANT_BLANK, VARIANT_BRANCH_2, VARIANT_MAIN


@dataclass(frozen=True)
class FacetOption:
    """One selectable value inside a facet group."""

    value: str
    label_ar: str
    label_en: str
    tokens: tuple[str, ...]

    def label(self, language: str) -> str:
        return self.label_ar if language == LANG_AR else self.label_en


@dataclass(frozen=True)
class FacetGroup:
    """Secondary filter dimension scoped to a single category."""

    key: str
    options: tuple[FacetOption, ...]

    def option(self, value: str) -> FacetOption | None:
        for opt in self.options:
            if opt.value == value:
                return opt
        return None

    def choices(self, language: str) -> list[tuple[str, str]]:
        """Return ``(value, label)`` pairs, led by the "all" choice."""

        all_label = ALL_LABELS.get(language, ALL_LABELS[LANG_EN])
        return [(ALL, all_label)] + [(opt.value, opt.label(language)) for opt in self.options]


ALL_LABELS: Final[Mapping[str, str]] = MappingProxyType(
    {LANG_AR: "كل الانواع", LANG_EN: "All types"}
)


class CategoryRegistry:
    """Static mapping of category key to display names and facet group."""

    def __init__(
        self,
        names: Mapping[str, Mapping[str, str]],
        facets: Mapping[str, FacetGroup],
    ) -> None:
        self._names = MappingProxyType({k: MappingProxyType(dict(v)) for k, v in names.items()})
        self._facets = MappingProxyType(dict(facets))

    def keys(self) -> tuple[str, ...]:
        return tuple(self._names)

    def is_known(self, category: str) -> bool:
        return category in self._names

    def display_name(self, category: str, language: str) -> str:
        """Return the localized label, or the raw key when unmapped."""

        labels = self._names.get(category)
        if labels is None:
            return category
        return labels.get(language, category)

    def facet_group(self, category: str) -> FacetGroup | None:
        return self._facets.get(category)

    def sub_facets(self, category: str, language: str) -> list[tuple[str, str]]:
        """Return ordered ``(value, label)`` facet options for ``category``.

        Categories without a facet group expose none.
        """

        group = self._facets.get(category)
        if group is None:
            return []
        return [(opt.value, opt.label(language)) for opt in group.options]

    def facet_tokens(self, category: str, facet_key: str, value: str) -> tuple[str, ...] | None:
        """Look up the match tokens for a ``(category, facet, value)`` triple.

        Returns None when the triple names no rule.
        """

        group = self._facets.get(category)
        if group is None or group.key != facet_key:
            return None
        opt = group.option(value)
        return opt.tokens if opt is not None else None


def _opt(value: str, label_ar: str, label_en: str, *tokens: str) -> FacetOption:
    return FacetOption(value=value, label_ar=label_ar, label_en=label_en, tokens=tokens)


def _names(berwaz_ar: str) -> dict[str, dict[str, str]]:
    return {
        "chairs": {LANG_EN: "Chairs", LANG_AR: "كراسي"},
        "tables": {LANG_EN: "Tables", LANG_AR: "ترابيزات"},
        "sofas": {LANG_EN: "Sofas", LANG_AR: "السلالم"},
        "storage": {LANG_EN: "Storage", LANG_AR: "الشماعات"},
        "beds": {LANG_EN: "Beds", LANG_AR: "السراير"},
        "desk": {LANG_EN: "desks", LANG_AR: "المكاتب"},
        "boxs": {LANG_EN: "boxs", LANG_AR: "الجزامات"},
        "fedyat": {LANG_EN: "fedyat", LANG_AR: "فضية"},
        "trabezatmadhona": {LANG_EN: "trabezatmadhona", LANG_AR: "ترابيزات مدهونة"},
        "gazamatmadhona": {LANG_EN: "gazamatmadhona", LANG_AR: "جزامات مدهونة"},
        "berwaz": {LANG_EN: "berwaz", LANG_AR: berwaz_ar},
        "hamelMoshaf": {LANG_EN: "hamelMoshaf", LANG_AR: "حامل مصحف"},
        "istales": {LANG_EN: "istales", LANG_AR: "استلس تيل"},
        "regol": {LANG_EN: "regol", LANG_AR: "الرجول"},
        "hlaya": {LANG_EN: "hlaya", LANG_AR: "الحلايا"},
    }


# Options shared by several groups
_BAR = _opt("bar", "بار", "Bar", "بار")
_SELM = _opt("selm", "سلم", "Ladder", "سلم")
_BAFAT = _opt("bafat", "بفات", "Poufs", "بف")
_TAQM = _opt("taqm", "الاطقم", "Sets", "طقم")
_TAQTOQA = _opt("taqtoqa", "طقطوقة", "Side tables", "طقطوقة")
_TV = _opt("tv", "شاشة", "TV", "شاشة")
_ABYAD = _opt("abyad", "أبيض", "White", "عجينة", "زان", "سويد", "مشيشة", "علبة", "فواطة")
_MRAYA = _opt("mraya", "مراية", "Mirror", "مراية")

_TABLES = FacetGroup(
    key="tablesType",
    options=(
        _opt("matbakh", "مطبخ", "Kitchen", "مطبخ", "شنطة"),
        _opt("thabta", "ثابتة", "Fixed", "قهوة", "واحد دور", "اتنين دور", " الرحمة"),
        _opt("coffee", "انترية", "Living room", "انترية"),
        _opt("dining", "سفرة", "Dining", "سفرة"),
        _TAQM,
        _TAQTOQA,
        _TV,
    ),
)

_ISTALES = FacetGroup(
    key="istalesType",
    options=(
        _TAQM,
        _opt("kebera", "كبيرة", "Large", "كبيرة"),
        _opt("morab3", "مربعة / بيضاوى", "Square / Oval", "مربعة"),
        _opt("soqera", "صغيرة", "Small", "صغيرة"),
        _TAQTOQA,
    ),
)

_FULL_FACETS: Final[dict[str, FacetGroup]] = {
    "chairs": FacetGroup(
        key="chairsType",
        options=(
            _BAR,
            _SELM,
            _opt("dining", "سفرة", "Dining", "سفرة"),
            _opt("hazaz", "هزاز", "Rocking", "هزاز"),
            _BAFAT,
        ),
    ),
    "tables": _TABLES,
    "storage": FacetGroup(
        key="storageType",
        options=(_ABYAD, _MRAYA, _opt("madhon", "مدهون", "Painted", "مدهون")),
    ),
    "trabezatmadhona": FacetGroup(
        key="trabezatmadhonaType",
        options=(_opt("anterniya", "انترية", "Living room", "انترية"), _TAQM, _TAQTOQA, _TV),
    ),
    "gazamatmadhona": FacetGroup(
        key="gazamatmadhonaType",
        options=(
            _opt(
                "whadat",
                "وحدات تخزين",
                "Storage units",
                " ادراج",
                "دولاب ",
                "كانسور",
                "الشريف",
                "مراية",
            ),
            _opt("formyka", "فورميكا", "Formica", "فورميكا"),
            _opt("kontar", "كونتر", "Counter", "كونتر"),
        ),
    ),
    "istales": _ISTALES,
    "regol": FacetGroup(
        key="regolType",
        options=(
            _TAQM,
            _opt("ka3b", "الكعوب", "Heels", "كعب"),
            _opt("reglBezawya", "رجل بزاوية", "Angled legs", "رجل بزاوية"),
            _opt("istales", "الاستلس", "Stainless legs", "رجل استلس"),
        ),
    ),
}

_BRANCH_2_FACETS: Final[dict[str, FacetGroup]] = {
    "chairs": FacetGroup(
        key="chairsType",
        options=(_BAR, _SELM, _opt("maktab", "مكتب", "Office", "مكتب"), _BAFAT),
    ),
    "tables": _TABLES,
    "storage": FacetGroup(key="storageType", options=(_ABYAD, _MRAYA)),
    "istales": _ISTALES,
}

REGISTRY_MAIN: Final[CategoryRegistry] = CategoryRegistry(_names("براويز"), _FULL_FACETS)
REGISTRY_BRANCH_2: Final[CategoryRegistry] = CategoryRegistry(
    _names("براويز و مرايات"), _BRANCH_2_FACETS
)
REGISTRY_BLANK: Final[CategoryRegistry] = CategoryRegistry(
    _names("براويز و مرايات"), _FULL_FACETS
)

REGISTRIES: Final[Mapping[str, CategoryRegistry]] = MappingProxyType(
    {
        VARIANT_MAIN: REGISTRY_MAIN,
        VARIANT_BRANCH_2: REGISTRY_BRANCH_2,
        VARIANT_BLANK: REGISTRY_BLANK,
    }
)


def get_registry(name: str) -> CategoryRegistry:
    """Return the registry for a variant, defaulting to the main layout."""

    return REGISTRIES.get(name, REGISTRY_MAIN)
