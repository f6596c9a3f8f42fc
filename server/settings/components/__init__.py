from pathlib import Path

from decouple import AutoConfig

# Build paths inside the project like this: BASE_DIR / 'some'
BASE_DIR = Path(__file__).parent.parent.parent.parent

# Reads `config/.env` when present, otherwise the process environment
config = AutoConfig(search_path=BASE_DIR.joinpath('config'))
