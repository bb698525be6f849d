from typing import Literal, TypeAlias


NodeKind: TypeAlias = Literal["split", "leaf"]
PacingIndex: TypeAlias = Literal["preorder", "heap"]
ModelSource: TypeAlias = Literal["text", "structured"]
