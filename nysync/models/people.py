"""
People data model.

Legislators are maintained by a separate members sync; the bill sync only
reads them to resolve sponsors and voters.
"""
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Person(BaseModel):
    """
    A state legislator as stored in the people collection.
    """
    model_config = ConfigDict(extra="ignore")

    people_id: int
    name: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    district: Optional[str] = None  # "SD-008" / "HD-075"

    def __str__(self) -> str:
        district_str = f" ({self.district})" if self.district else ""
        return f"{self.name or self.last_name}{district_str}"
