from typing import Annotated

from fastapi import Depends

from steadcore.services.rules import Config, get_config

CurrentConfig = Annotated[Config, Depends(get_config)]
