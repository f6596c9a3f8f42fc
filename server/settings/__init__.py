"""Main settings file.

Settings are split into components and assembled here with
django-split-settings. Values that differ between environments are
read from the environment via python-decouple.
"""

from split_settings.tools import include

include(
    'components/common.py',
    'components/logging.py',
    'components/viewer.py',
)
