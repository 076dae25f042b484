"""User-facing message catalogue.

Messages are looked up by key; the English text is passed at the call site as
the default, so only non-English catalogues live here.
"""

from __future__ import annotations

import os
from typing import Any, Dict, Optional

DEFAULT_LANGUAGE = "en"
LANG_ENV_VAR = "GH_REPO_BOOTSTRAP_LANG"

_LANGUAGES: Dict[str, str] = {
    "en": "English",
    "fr": "Français",
}

_CATALOGS: Dict[str, Dict[str, str]] = {
    "fr": {
        # cli
        "cli_description": (
            "Applique les options de fusion, les fonctions de sécurité, un ruleset de branche "
            "et les labels à un nouveau dépôt GitHub."
        ),
        "arg_repo_help": (
            "Dépôt cible (OWNER/REPO ou HOST/OWNER/REPO). "
            "Par défaut $GH_REPO, puis le dépôt gh courant."
        ),
        "arg_lang_help": "Langue de l'interface (anglais par défaut).",
        "option_config_help": "Fichier JSON qui remplace les réglages intégrés.",
        "option_dry_run_help": "Afficher ce qui serait appliqué sans appeler GitHub.",
        "option_print_payload_help": "Afficher le JSON du ruleset de branche puis quitter.",
        "option_skip_validate_help": "Ignorer la validation locale du payload (schéma OpenAPI).",
        "option_replace_existing_help": (
            "Mettre à jour un ruleset du même nom au lieu d'en créer un autre."
        ),
        "option_strict_help": "Terminer avec le code 1 si une étape a échoué.",
        "option_verbose_help": "Journaliser les appels gh et le résultat des étapes.",
        "error_keyboard_interrupt": "\nInterrompu par l'utilisateur (Ctrl+C).",
        "error_config": "Erreur : {message}",
        "error_api": "Erreur : {message}",
        # api / utils
        "error_gh_missing": (
            "L'exécutable gh est introuvable. Installez GitHub CLI puis lancez `gh auth login`."
        ),
        "error_gh_failed": "La commande `{command}` a échoué : {stderr}",
        "error_invalid_json_response": "Réponse JSON invalide pour {method} {path} : {body}",
        "error_repo_url": (
            "Impossible d'interpréter l'URL fournie. Format attendu : https://HOST/OWNER/REPO."
        ),
        "error_repo_format": (
            "Dépôt '{value}' invalide. Utilisez OWNER/REPO ou HOST/OWNER/REPO."
        ),
        "error_repo_current": (
            "Impossible de déterminer le dépôt courant avec `gh repo view`. "
            "Passez OWNER/REPO en argument."
        ),
        "error_repo_empty": "Réponse vide de `gh repo view`. Passez OWNER/REPO en argument.",
        # steps
        "setup_start": "Configuration du dépôt GitHub : {repo}",
        "setup_dry_run": "(simulation : aucune modification ne sera faite)",
        "phase_general": "\nMise à jour des réglages généraux...",
        "phase_security": "\nActivation des fonctions de sécurité...",
        "phase_ruleset": "\nCréation du ruleset de branche...",
        "phase_labels": "\nCréation des labels...",
        "ruleset_failed": (
            "  Attention : échec de création du ruleset "
            "(il existe peut-être déjà ou les droits sont insuffisants)"
        ),
        "summary_counts": "\nBilan : {ok} réussie(s), {failed} en échec, {skipped} ignorée(s).",
        "summary_failure_entry": "- [{phase}] {name} : {reason}",
        "setup_done": "\nTerminé !",
    },
}

_current_language = DEFAULT_LANGUAGE


def available_languages() -> Dict[str, str]:
    return dict(_LANGUAGES)


def set_language(language: Optional[str]) -> str:
    """Select the active language, falling back to English when unknown."""

    global _current_language
    code = (language or DEFAULT_LANGUAGE).lower()
    _current_language = code if code in _LANGUAGES else DEFAULT_LANGUAGE
    return _current_language


def get_language() -> str:
    return _current_language


def language_from_env(environ: Optional[Dict[str, str]] = None) -> str:
    env = os.environ if environ is None else environ
    explicit = env.get(LANG_ENV_VAR)
    if explicit:
        return explicit.lower()
    for variable in ("LC_ALL", "LC_MESSAGES", "LANG"):
        value = env.get(variable)
        if not value:
            continue
        # e.g. fr_FR.UTF-8
        code = value.split(".", 1)[0].split("_", 1)[0].lower()
        if code in _LANGUAGES:
            return code
    return DEFAULT_LANGUAGE


def translate(key: str, default: str, **kwargs: Any) -> str:
    template = _CATALOGS.get(_current_language, {}).get(key, default)
    if kwargs:
        return template.format(**kwargs)
    return template


__all__ = [
    "available_languages",
    "get_language",
    "language_from_env",
    "set_language",
    "translate",
]
