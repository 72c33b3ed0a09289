#!/usr/bin/env python3
"""
Story PDF generation CLI.

Thin entry point around cuento.cli for running from a checkout:

    scripts/generate_story_pdf.py generate data/stories/dragon.json
    scripts/generate_story_pdf.py preview data/stories/dragon.json
    scripts/generate_story_pdf.py stats
    scripts/generate_story_pdf.py cleanup --max-age-hours 24
"""

from cuento.cli import app

if __name__ == "__main__":
    app()
