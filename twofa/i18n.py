# (c) Copyright Datacraft, 2026
"""Message translation for mails and driver descriptions."""
import gettext
from functools import lru_cache
from pathlib import Path

LOCALE_DIR = Path(__file__).parent / "locale"
DOMAIN = "twofa"


@lru_cache()
def get_translations(locale: str | None) -> gettext.NullTranslations:
	"""Get catalog for a locale, falling back to the untranslated strings."""
	if not locale:
		return gettext.NullTranslations()

	# "de-DE" and "de_DE" both resolve to the "de_DE" then "de" catalogs
	language = locale.replace("-", "_")
	return gettext.translation(
		DOMAIN,
		localedir=LOCALE_DIR,
		languages=[language, language.split("_")[0]],
		fallback=True,
	)


def translate(message: str, locale: str | None = None) -> str:
	return get_translations(locale).gettext(message)
