# caimport/commands/helpers.py

from __future__ import annotations

import argparse
from typing import List, Type, TypeVar

import pydantic
from pydantic import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)

def prune_opts(model: Type[ModelT], ns: argparse.Namespace) -> ModelT:
    """
    Prune an argparse namespace down to fields the Pydantic model knows about,
    then validate. Unknown args (log_level, handler, etc.) are ignored, and
    options that were not given are left out so the model reports them missing.
    """
    data = vars(ns)
    allowed = model.model_fields.keys()
    pruned = {k: data[k] for k in allowed if data.get(k) is not None}

    return model.model_validate(pruned)

def option_errors(err: pydantic.ValidationError) -> List[str]:
    """
    Render pydantic validation errors in terms of command line flags.
    """
    missing: List[str] = []
    messages: List[str] = []

    for detail in err.errors():
        flag = "--" + str(detail["loc"][0]).replace("_", "-")
        if detail["type"] == "missing":
            missing.append(flag)
        else:
            messages.append(f"{flag}: {detail['msg']}")

    if missing:
        messages.insert(0, f"Missing required argument(s): {', '.join(missing)}")

    return messages
