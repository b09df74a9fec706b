"""Allow `python -m openai_tts`."""

import sys

from openai_tts.cli import main

sys.exit(main())
