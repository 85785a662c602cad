"""Map free-text neighborhood input to the names the price model was trained on."""

import unicodedata

# Canonical Buenos Aires barrios known to the model.
CANONICAL_NEIGHBORHOODS = (
    "Agronomía",
    "Almagro",
    "Balvanera",
    "Barracas",
    "Barrio Norte",
    "Belgrano",
    "Boca",
    "Boedo",
    "Caballito",
    "Chacarita",
    "Coghlan",
    "Colegiales",
    "Constitución",
    "Flores",
    "Floresta",
    "Liniers",
    "Mataderos",
    "Monte Castro",
    "Monserrat",
    "Nueva Pompeya",
    "Núñez",
    "Palermo",
    "Parque Avellaneda",
    "Parque Chacabuco",
    "Parque Chas",
    "Parque Patricios",
    "Paternal",
    "Puerto Madero",
    "Recoleta",
    "Retiro",
    "Saavedra",
    "San Cristóbal",
    "San Nicolás",
    "San Telmo",
    "Vélez Sársfield",
    "Versalles",
    "Villa Crespo",
    "Villa del Parque",
    "Villa Devoto",
    "Villa General Mitre",
    "Villa Lugano",
    "Villa Luro",
    "Villa Ortúzar",
    "Villa Pueyrredón",
    "Villa Real",
    "Villa Riachuelo",
    "Villa Santa Rita",
    "Villa Soldati",
    "Villa Urquiza",
)

# Sub-neighborhoods, listing-site spellings and informal names.
NEIGHBORHOOD_ALIASES = {
    "palermo soho": "Palermo",
    "palermo hollywood": "Palermo",
    "palermo chico": "Palermo",
    "palermo viejo": "Palermo",
    "palermo nuevo": "Palermo",
    "palermo botanico": "Palermo",
    "las canitas": "Palermo",
    "belgrano r": "Belgrano",
    "belgrano c": "Belgrano",
    "belgrano chico": "Belgrano",
    "bajo belgrano": "Belgrano",
    "barrio chino": "Belgrano",
    "la boca": "Boca",
    "montserrat": "Monserrat",
    "centro": "San Nicolás",
    "microcentro": "San Nicolás",
    "tribunales": "San Nicolás",
    "congreso": "Balvanera",
    "once": "Balvanera",
    "abasto": "Balvanera",
    "la paternal": "Paternal",
    "pompeya": "Nueva Pompeya",
    "villa gral mitre": "Villa General Mitre",
    "villa gral. mitre": "Villa General Mitre",
    "parque centenario": "Caballito",
    "primera junta": "Caballito",
    "botanico": "Palermo",
    "catalinas": "Retiro",
    "velez sarfield": "Vélez Sársfield",
    "nuniez": "Núñez",
}

# "Zona X" groupings used by some listing portals.
ZONE_ALIASES = {
    "zona norte": "Núñez",
    "zona centro": "San Nicolás",
    "zona sur": "Barracas",
    "zona oeste": "Flores",
}


def strip_accents(value: str) -> str:
    normalized = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in normalized if unicodedata.category(ch) != "Mn")


def _build_lookup() -> dict[str, str]:
    lookup: dict[str, str] = {}
    for name in CANONICAL_NEIGHBORHOODS:
        key = name.lower()
        lookup[key] = name
        lookup[strip_accents(key)] = name
        lookup[f"zona {key}"] = name
        lookup[f"zona {strip_accents(key)}"] = name
    for alias_table in (NEIGHBORHOOD_ALIASES, ZONE_ALIASES):
        for alias, name in alias_table.items():
            lookup[alias] = name
            lookup[strip_accents(alias)] = name
    return lookup


NEIGHBORHOOD_LOOKUP = _build_lookup()


def _capitalize_first(value: str) -> str:
    return value[:1].upper() + value[1:]


def normalize_neighborhood(raw: str | None) -> str:
    """Return the canonical barrio name for ``raw``.

    Case, surrounding whitespace, repeated inner spaces and accents are
    ignored. Unknown names come back trimmed with the first letter upper-cased
    so the inference function can decide whether it accepts them.
    """
    if not raw:
        return ""

    trimmed = raw.strip()
    key = " ".join(trimmed.lower().split())
    if not key:
        return ""

    match = NEIGHBORHOOD_LOOKUP.get(key) or NEIGHBORHOOD_LOOKUP.get(strip_accents(key))
    if match:
        return match
    return _capitalize_first(trimmed)

