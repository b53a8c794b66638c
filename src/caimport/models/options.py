# caimport/models/options.py

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from caimport.services.importer import ImportRequest


class ImportOptions(BaseModel):
    """
    Validated `ca import` options.
    """
    model_config = ConfigDict(frozen=True)

    cert_bundle: Path
    private_key: Path
    crl_chain: Path
    config: Optional[Path] = None

    def to_request(self) -> ImportRequest:
        return ImportRequest(
            cert_bundle=self.cert_bundle,
            private_key=self.private_key,
            crl_chain=self.crl_chain,
            config=self.config,
        )
