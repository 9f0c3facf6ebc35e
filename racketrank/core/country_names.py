"""
Country name tables and normalization helpers.

Profiles are not normalized upstream: the same country shows up as "Turkey",
"Türkiye" or "Turkiye" depending on who typed it. Everything here is read-only
module state built at import time.
"""
from typing import Dict, Optional, Tuple

UNKNOWN = "Unknown"

# Canonical label -> lower-cased spellings accepted as that country
COUNTRY_SYNONYMS: Dict[str, Tuple[str, ...]] = {
    "Turkey": ("turkey", "türkiye", "turkiye", "tr"),
    "United States": (
        "usa", "united states", "united states of america",
        "amerika birleşik devletleri", "amerika birlesik devletleri",
        "us", "u.s.a.", "u.s.",
    ),
    "United Kingdom": (
        "uk", "united kingdom", "birleşik krallık", "birlesik krallik",
        "great britain", "england",
    ),
    "Germany": ("germany", "deutschland", "almanya", "de"),
    "France": ("france", "fransa", "fr"),
    "Spain": ("spain", "españa", "ispanya", "es"),
    "Italy": ("italy", "italia", "italya", "it"),
    "Netherlands": ("netherlands", "holland", "hollanda", "nl"),
    "Greece": ("greece", "yunanistan", "gr"),
    "Canada": ("canada", "kanada", "ca"),
    "Australia": ("australia", "avustralya", "au"),
    "Brazil": ("brazil", "brasil", "brezilya", "br"),
}

# Canonical label -> spellings that may appear verbatim in the profile store
COUNTRY_VARIANTS: Dict[str, Tuple[str, ...]] = {
    "Turkey": ("Turkey", "Türkiye", "Turkiye", "turkey", "türkiye", "turkiye"),
    "United States": (
        "United States", "USA", "United States of America",
        "Amerika Birleşik Devletleri", "Amerika Birlesik Devletleri",
        "US", "U.S.A.", "U.S.",
    ),
    "United Kingdom": (
        "United Kingdom", "UK", "Birleşik Krallık", "Birlesik Krallik",
        "Great Britain", "England",
    ),
    "Germany": ("Germany", "Deutschland", "Almanya"),
    "France": ("France", "Fransa"),
    "Spain": ("Spain", "España", "Ispanya"),
    "Italy": ("Italy", "Italia", "Italya"),
    "Netherlands": ("Netherlands", "Holland", "Hollanda"),
    "Greece": ("Greece", "Yunanistan"),
    "Canada": ("Canada", "Kanada"),
    "Australia": ("Australia", "Avustralya"),
    "Brazil": ("Brazil", "Brasil", "Brezilya"),
}

# English name -> spelling used by the profile store (Turkish, ASCII-folded)
STORE_SPELLINGS: Dict[str, str] = {
    "Turkey": "Turkiye",
    "United States": "Amerika Birlesik Devletleri",
    "United Kingdom": "Birlesik Krallik",
    "Germany": "Almanya",
    "France": "Fransa",
    "Italy": "Italya",
    "Spain": "Ispanya",
    "Netherlands": "Hollanda",
    "Belgium": "Belcika",
    "Greece": "Yunanistan",
    "Bulgaria": "Bulgaristan",
    "Romania": "Romanya",
    "Russia": "Rusya",
    "Ukraine": "Ukrayna",
    "Poland": "Polonya",
    "Czech Republic": "Cek Cumhuriyeti",
    "Austria": "Avusturya",
    "Switzerland": "Isvicre",
    "Sweden": "Isvec",
    "Norway": "Norvec",
    "Denmark": "Danimarka",
    "Finland": "Finlandiya",
    "Portugal": "Portekiz",
    "Ireland": "Irlanda",
    "Canada": "Kanada",
    "Australia": "Avustralya",
    "New Zealand": "Yeni Zelanda",
    "Japan": "Japonya",
    "China": "Cin",
    "India": "Hindistan",
    "Brazil": "Brezilya",
    "Argentina": "Arjantin",
    "Mexico": "Meksika",
    "South Africa": "Guney Afrika",
    "Egypt": "Misir",
    "Saudi Arabia": "Suudi Arabistan",
    "United Arab Emirates": "Birlesik Arap Emirlikleri",
    "Israel": "Israil",
    "Iran": "Iran",
    "Iraq": "Irak",
    "Syria": "Suriye",
    "Lebanon": "Lubnan",
    "Jordan": "Urdun",
    "Cyprus": "Kibris",
    "Azerbaijan": "Azerbaycan",
    "Georgia": "Gurcistan",
    "Armenia": "Ermenistan",
}

_SYNONYM_INDEX: Dict[str, str] = {
    synonym: canonical
    for canonical, synonyms in COUNTRY_SYNONYMS.items()
    for synonym in synonyms
}

_STORE_SPELLINGS_LOWER: Dict[str, str] = {
    name.lower(): spelling for name, spelling in STORE_SPELLINGS.items()
}


def _fold(text: str) -> str:
    # str.lower() turns "İ" into "i" plus a combining dot; dotless "ı" upper-cases to a plain "I"
    return text.replace("İ", "i").replace("ı", "i").lower()


def normalize_country(raw: Optional[str]) -> Optional[str]:
    """
    Map a raw country string to its canonical label.

    Returns None for missing or blank input. Unknown names come back with only
    the first character upper-cased; treat those as low-confidence.
    """
    if not raw:
        return None

    text = raw.strip()
    if not text:
        return None

    canonical = _SYNONYM_INDEX.get(_fold(text))
    if canonical:
        return canonical

    # capitalize() can change the folded form ("ß" -> "Ss")
    fallback = text.capitalize()
    return _SYNONYM_INDEX.get(_fold(fallback), fallback)


def variants_for(canonical: str) -> Tuple[str, ...]:
    """Spellings to OR together when matching a canonical country in the store."""
    return COUNTRY_VARIANTS.get(canonical, (canonical,))


def to_store_spelling(country: Optional[str]) -> Optional[str]:
    """Map an English country name to the store's Turkish spelling, if known."""
    if not country or country == UNKNOWN:
        return country

    if country in STORE_SPELLINGS:
        return STORE_SPELLINGS[country]

    spelling = _STORE_SPELLINGS_LOWER.get(country.strip().lower())
    if spelling:
        return spelling

    canonical = normalize_country(country)
    return STORE_SPELLINGS.get(canonical, country)


def is_known(value: Optional[str]) -> bool:
    """True if a location field carries a usable value."""
    return bool(value and value.strip() and value.strip() != UNKNOWN)
