from typing import Literal, TypeAlias


Direction: TypeAlias = Literal["left", "right"]
