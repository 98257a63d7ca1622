"""
Location model
"""
from sqlalchemy import Column, Integer, String, Float, JSON, event

from app.core.database import Base
from app.jobboard.text_search import build_document


class Location(Base):
    """City with a geographic point, searchable for autocomplete"""

    __tablename__ = "locations"

    id = Column(Integer, primary_key=True, index=True)
    city = Column(String(255), nullable=False)
    country = Column(String(255), nullable=False)
    state = Column(String(255))

    # WGS84 point
    latitude = Column(Float)
    longitude = Column(Float)

    # Derived from city (A), country and state (B). Never set directly.
    tsdoc = Column(JSON, nullable=False, default=dict)

    def build_tsdoc(self):
        return build_document(
            [
                (self.city, "A"),
                (self.country, "B"),
                (self.state, "B"),
            ]
        )


@event.listens_for(Location, "before_insert")
@event.listens_for(Location, "before_update")
def _refresh_location_tsdoc(mapper, connection, target):
    target.tsdoc = target.build_tsdoc()
