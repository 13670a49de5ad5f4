from __future__ import annotations

from typing import Dict, Optional

DEFAULT_LOCALE = "en"
LOCALE_COOKIE = "tev_lang"

MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "admintools.success": "success",
        "admintools.noMediaPath": "No media directory configured for this blog",
        "admintools.invalidSourceDir": "Source directory does not exist",
        "admintools.copyError": "Error copying files",
        "staging.invalidTargetDir": "Target directory does not exist",
        "staging.fetchError": "Unable to fetch the photos for this post",
        "staging.copyError": "Error copying files to the target directory",
        "upload.success": "Upload complete",
        "media.notFound": "Media file not found",
    },
    "fr": {
        "admintools.success": "succès",
        "admintools.noMediaPath": "Aucun répertoire média configuré pour ce blog",
        "admintools.invalidSourceDir": "Le répertoire source n'existe pas",
        "admintools.copyError": "Erreur lors de la copie des fichiers",
        "staging.invalidTargetDir": "Le répertoire cible n'existe pas",
        "staging.fetchError": "Impossible de récupérer les photos de ce billet",
        "staging.copyError": "Erreur lors de la copie vers le répertoire cible",
        "upload.success": "Import terminé",
        "media.notFound": "Fichier média introuvable",
    },
}

SUPPORTED_LOCALES = frozenset(MESSAGES)


def normalize_locale(raw: Optional[str]) -> Optional[str]:
    """'fr_FR', 'fr-fr', 'FR' -> 'fr'; unsupported -> None."""
    if not raw:
        return None
    lang = raw.strip().replace("_", "-").split("-", 1)[0].lower()
    return lang if lang in SUPPORTED_LOCALES else None


def message(key: str, locale: Optional[str] = None) -> str:
    table = MESSAGES.get(locale or DEFAULT_LOCALE) or MESSAGES[DEFAULT_LOCALE]
    return table.get(key) or MESSAGES[DEFAULT_LOCALE].get(key, key)
