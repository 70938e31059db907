"""Hand decompression bomb protection over to the image guard.

Pillow ships its own pixel-count check (``Image.MAX_IMAGE_PIXELS``) which
raises from inside ``Image.open``, before the guard has seen the header.
The guard enforces width, height and memory limits itself, so Pillow's
check is disabled here and its warning silenced.  The module is imported
by the peek service so the configuration is applied before any header is
read.
"""

from __future__ import annotations

import logging
import warnings

from PIL import Image

logger = logging.getLogger(__name__)

_pillow_limit = Image.MAX_IMAGE_PIXELS

# Limits are enforced by services.admission_service instead.
Image.MAX_IMAGE_PIXELS = None

# Suppress the specific warning but keep other warnings intact.
warnings.simplefilter("ignore", Image.DecompressionBombWarning)

logger.debug("Pillow pixel limit %s disabled in favour of the image guard", _pillow_limit)
