"""
Revenue tags (bank holidays, events) and the dates they are applied to
"""
from sqlalchemy import Column, Integer, String, Text, Date, Float, ForeignKey
from sqlalchemy.orm import relationship
from backoffice.database import Base


class RevenueTag(Base):
    __tablename__ = "revenue_tags"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)

    # Percentage deltas observed on past tagged dates: 25 = +25%
    historical_food_revenue_impact = Column(Float, nullable=False, default=0)
    historical_beverage_revenue_impact = Column(Float, nullable=False, default=0)
    occurrence_count = Column(Integer, nullable=False, default=0)


class TaggedDate(Base):
    __tablename__ = "tagged_dates"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False, unique=True, index=True)
    tag_id = Column(Integer, ForeignKey("revenue_tags.id"), nullable=False)

    # Manual overrides win over the tag's historical impact
    manual_food_revenue_impact = Column(Float, nullable=True)
    manual_beverage_revenue_impact = Column(Float, nullable=True)

    tag = relationship("RevenueTag")
