"""TSA checkpoint passenger volumes: scrape, tidy, and describe weekday/holiday effects.

Library modules live here; CLI-friendly scripts are under /scripts.
"""

from .config import ProjectConfig
from .series import SeriesBuilder
