from sqlalchemy import Column, Boolean, ForeignKey, Text, String, Float, DateTime, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from core.database import BaseModel, GUID
from core.constants import ReviewStatus


class Review(BaseModel):
    __tablename__ = "reviews"
    __table_args__ = (
        # Natural key of an ingested review; ingestion inserts only when absent
        UniqueConstraint("source", "guest_name", "submitted_at", "property_id",
                         name="uq_reviews_source_guest_submitted_property"),
        Index("ix_reviews_property_submitted", "property_id", "submitted_at"),
    )

    source = Column(String(32), nullable=False, index=True)
    type = Column(String(32), nullable=False)
    status = Column(String(32), nullable=False, default=ReviewStatus.PUBLISHED.value)
    rating = Column(Float, nullable=True)  # native scale of the source
    overall_rating = Column(Float, nullable=True)
    public_review = Column(Text, nullable=False, default="")
    private_review = Column(Text, nullable=True)
    submitted_at = Column(DateTime(timezone=True), nullable=False)
    guest_name = Column(String(255), nullable=False)
    property_id = Column(String(255), nullable=False)
    property_name = Column(String(255), nullable=False)
    is_approved_for_public = Column(Boolean, nullable=False, default=False)
    manager_notes = Column(Text, nullable=True)

    # Relationships
    categories = relationship(
        "ReviewCategory",
        back_populates="review",
        cascade="all, delete-orphan",
        order_by="ReviewCategory.category",
    )


class ReviewCategory(BaseModel):
    __tablename__ = "review_categories"

    review_id = Column(GUID(), ForeignKey("reviews.id", ondelete="CASCADE"),
                       nullable=False, index=True)
    category = Column(String(100), nullable=False)
    rating = Column(Float, nullable=False)

    review = relationship("Review", back_populates="categories")
