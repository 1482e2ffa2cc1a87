"""Page front matter and schema.org structured data."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str) -> date:
    """Parse a ``YYYY-MM-DD`` date."""
    return datetime.strptime(value, DATE_FORMAT).date()


class PageInfo(BaseModel):
    """Front matter read from a page's leading ``page`` block."""

    model_config = ConfigDict(extra="forbid")

    title: str = ""
    id: str = ""
    desc: str = ""
    img_url: str = ""
    img_width: int = 0
    img_height: int = 0
    created: str = ""
    modified: str = ""
    hide_title_suffix: bool = False
    hide_back_to_top: bool = False
    hide_dates: bool = False
    has_map: bool = False
    has_graph: bool = False

    @field_validator("created", "modified", mode="before")
    @classmethod
    def _coerce_date(cls, value: object) -> object:
        # YAML loads unquoted YYYY-MM-DD values as dates.
        if isinstance(value, date):
            return value.strftime(DATE_FORMAT)
        return value

    @field_validator("created", "modified")
    @classmethod
    def _check_date(cls, value: str) -> str:
        if value:
            parse_date(value)
        return value


class ImageObject(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(default="ImageObject", alias="@type")
    url: str
    width: int
    height: int


class Person(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(default="Person", alias="@type")
    name: str
    email: str


class Organization(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(default="Organization", alias="@type")
    name: str
    url: str
    logo: ImageObject | None = None


class StructuredData(BaseModel):
    """schema.org ``Article`` describing a page.

    ``description``, ``dateModified`` and ``image`` are omitted from the JSON
    output when unset.
    """

    model_config = ConfigDict(populate_by_name=True)

    context: str = Field(default="http://schema.org", alias="@context")
    type: str = Field(default="Article", alias="@type")
    main_entity_of_page: str = Field(alias="mainEntityOfPage")
    headline: str
    description: str | None = None
    date_modified: str | None = Field(default=None, alias="dateModified")
    date_published: str = Field(alias="datePublished")
    author: Person
    publisher: Organization
    image: ImageObject | None = None

    def to_json(self) -> str:
        """Serialise to JSON safe for embedding in a ``<script>`` element."""
        payload = self.model_dump_json(by_alias=True, exclude_none=True)
        return payload.replace("<", "\\u003c")


__all__ = [
    "DATE_FORMAT",
    "ImageObject",
    "Organization",
    "PageInfo",
    "Person",
    "StructuredData",
    "parse_date",
]
