import dataclasses
import json
from enum import Enum

import numpy as np


class AdvancedJSONEncoder(json.JSONEncoder):
    """Encodes dataclasses, enums and numpy arrays/scalars found in domain state."""

    def default(self, o):
        if dataclasses.is_dataclass(o) and not isinstance(o, type):
            return dataclasses.asdict(o)
        if isinstance(o, np.ndarray):
            return o.tolist()
        if isinstance(o, (np.floating, np.integer)):
            return o.item()
        if isinstance(o, np.bool_):
            return bool(o)
        if isinstance(o, Enum):
            return o.value
        return super().default(o)


def dataclass_from_dict(cls, dct):
    if dataclasses.is_dataclass(cls):
        fieldtypes = {field.name: field.type for field in dataclasses.fields(cls)}
        return cls(**{field: dataclass_from_dict(fieldtypes[field], dct[field])
                      for field in dct if field in fieldtypes})
    else:
        return dct


def to_json(state: dict, **kwargs) -> str:
    return json.dumps(state, cls=AdvancedJSONEncoder, **kwargs)


def from_json(text: str) -> dict:
    return json.loads(text)
