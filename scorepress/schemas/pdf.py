"""
ScorePress Backend — PDF Endpoint Schemas
===========================================

What:  Request bodies for /generatePDF and /combine-pdfs.
Why:   Shape validation (is it an array? are the items objects?) happens here;
       semantic checks (array present, length matches the catalog) happen in
       the services so they share the 400 `validation_error` envelope.

Both endpoints respond with binary PDF, so there are no response models.
"""

from typing import List, Optional, Union

from pydantic import BaseModel, Field


class ImageRef(BaseModel):
    src: Optional[str] = Field(default=None, description="Absolute URL of the image")
    alt: Optional[str] = Field(default=None, description="Caption drawn under the image")


class Destination(BaseModel):
    """
    One booklet page. Unknown keys (e.g. a destination name) are ignored.

    `img` may be null; that destination is skipped, the rest still render.
    """
    img: Optional[ImageRef] = Field(default_factory=ImageRef)


class GeneratePdfRequest(BaseModel):
    destinations: Optional[List[Destination]] = Field(
        default=None,
        description="Ordered destinations; output pages follow this order",
    )


class CombinePdfsRequest(BaseModel):
    # Union[bool, int]: clients send 0/1 from checkboxes, some send true/false
    checkboxStates: Optional[List[Union[bool, int]]] = Field(
        default=None,
        description="Selection flags, one per catalog entry, in catalog order",
    )
