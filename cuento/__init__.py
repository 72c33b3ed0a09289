"""
CUENTO - Children's story documents rendered to PDF

A pipeline that turns structured story records into finished, paginated PDF
storybooks using HTML templates and a headless browser.

Architecture:
- Templating Context: Story record to HTML through Jinja2 templates
- Rendering Context: HTML to PDF through a shared headless Chromium
- Storage Context: Artifact persistence, statistics and retention pruning
- Pipeline Context: Validation, orchestration and result assembly
"""

__version__ = "0.1.0"
