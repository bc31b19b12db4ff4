"""
NLTK data used by the recipe parser and ingredient name matching.

Sentence splitting uses the Punkt models ("punkt_tab") and singular forms
use WordNet ("wordnet"). A missing resource is fetched with nltk.download()
the first time it is needed. Set CHOPCHOP_NLTK_DOWNLOAD=0 on machines that
must not download; callers then degrade as documented on each caller.
"""

import logging
import os
from functools import lru_cache

import nltk

logger = logging.getLogger(__name__)

DOWNLOAD_VARIABLE = "CHOPCHOP_NLTK_DOWNLOAD"

# Downloader package name -> path inside an nltk_data directory
NLTK_RESOURCES = {
    "punkt_tab": "tokenizers/punkt_tab",
    "wordnet": "corpora/wordnet",
}


def _installed(name: str) -> bool:
    try:
        nltk.data.find(NLTK_RESOURCES[name])
    except LookupError:
        return False
    return True


@lru_cache(maxsize=None)
def ensure_resource(name: str) -> bool:
    """
    Make sure an NLTK data package is installed.

    Args:
        name: Key of NLTK_RESOURCES, e.g. "wordnet"

    Returns:
        True if the package can be loaded. The answer is cached, so a
        failed download is only attempted once per process.
    """
    if _installed(name):
        return True

    if os.environ.get(DOWNLOAD_VARIABLE, "1") == "0":
        logger.warning(f"NLTK data '{name}' is missing and {DOWNLOAD_VARIABLE}=0")
        return False

    logger.info(f"Downloading NLTK data '{name}'")
    if not nltk.download(name, quiet=True) or not _installed(name):
        logger.warning(f"NLTK data '{name}' could not be downloaded")
        return False
    return True
