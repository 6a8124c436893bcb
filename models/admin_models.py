"""
Admin request models
"""
from datetime import datetime
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class BulkActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_ids: List[str] = Field(default_factory=list, alias="userIds")
    action: str
    # Checked by the lifecycle service so non-numeric values get a 400, not a 422
    value: Optional[Any] = None


class ActivityRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    activity_type: str = Field(alias="activityType")
    target_id: Optional[str] = Field(default=None, alias="targetId")
    target_title: Optional[str] = Field(default=None, alias="targetTitle")


class AlumniApplyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    batch_number: Optional[Any] = Field(default=None, alias="batchNumber")


class AlumniReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    action: str
    rejection_reason: Optional[str] = Field(default=None, alias="rejectionReason")
    reviewer_id: Optional[str] = Field(default=None, alias="reviewerId")


class AlumniBatchRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    batch_number: Optional[Any] = Field(default=None, alias="batchNumber")
    name: str
    graduation_date: Optional[datetime] = Field(default=None, alias="graduationDate")
