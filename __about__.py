# -*- coding: utf-8 -*-
# Loupe: Perceptual error maps for rendered images.
#
# Copyright (c) 2026 opticsWolf
#
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Project metadata for the opticsWolf Loupe.
"""

from typing import Final

# Metadata Definitions
__title__: Final[str] = "Loupe"
__description__: Final[str] = (
    "A JIT-compiled FLIP evaluator that maps where two renderings of the "
    "same scene differ visibly, and pools the error into robust statistics."
)
__version__: Final[str] = "0.1.0"
__author__: Final[str] = "opticsWolf"
__license__: Final[str] = "LGPL-3.0-or-later"
__copyright__: Final[str] = "Copyright (c) 2026 opticsWolf"
__flip_version__: Final[str] = "1.2"

def metadata_summary() -> dict[str, str]:
    """Returns a dictionary of project metadata for introspection."""
    return {
        "title": __title__,
        "version": __version__,
        "flip_version": __flip_version__,
        "license": __license__,
        "description": __description__,
        "copyright": __copyright__,
    }
