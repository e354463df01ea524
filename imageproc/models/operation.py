from enum import Enum


class UnknownOperation(ValueError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown operation: {name}")
        self.name = name


class Operation(str, Enum):
    RESIZE = "resize"
    GRAYSCALE = "grayscale"
    BLUR = "blur"
    BRIGHTEN = "brighten"
    ROTATE = "rotate"
    FLIP = "flip"

    @classmethod
    def parse(cls, name: str) -> "Operation":
        # Case-sensitive: "Resize" is not "resize".
        try:
            return cls(name)
        except ValueError as exc:
            raise UnknownOperation(name) from exc


class FlipDirection(str, Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"
