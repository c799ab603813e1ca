from pydantic import BaseModel, ConfigDict
from typing import List, Optional, Dict, Union, Any

# --- BASE ---
class DocumentModel(BaseModel):
    """Stored documents keep any extra fields the store hands back."""
    model_config = ConfigDict(extra="allow")

    id: str

# --- CONTENT ---
class Blog(DocumentModel):
    title: str = ""
    readingTime: str = ""
    category: str = ""
    content: str = ""
    imageUrl: Optional[str] = None
    dateUploaded: Optional[str] = None

class FAQ(DocumentModel):
    question: str = ""
    answer: str = ""
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

class Program(DocumentModel):
    programType: str = ""
    planType: str = ""
    price: Optional[float] = None
    duration: str = ""
    description: str = ""
    facilities: List[str] = []
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

class Testimonial(DocumentModel):
    name: str = ""
    programType: str = ""
    review: str = ""
    rating: int = 5  # 1-5 stars
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

class Trainer(DocumentModel):
    name: str = ""
    speciality: str = ""
    imageUrl: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

class Transformation(DocumentModel):
    title: str = ""
    category: str = ""
    duration: str = ""
    description: str = ""
    quote: str = ""
    howWeDidIt: str = ""
    beforeImage: Optional[str] = None
    afterImage: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

# --- LEADS ---
class Lead(DocumentModel):
    Data_id: Optional[Union[int, str]] = None
    user_name: Optional[str] = None
    user_age: Optional[Union[int, str]] = None
    user_contact: Optional[str] = None
    created_at: Optional[str] = None
    status: str = "unread"  # 'unread' or 'read'

# --- GYM DETAILS ---
class BasicDetails(BaseModel):
    phone: str = ""
    email: str = ""
    address: str = ""
    updatedAt: Optional[str] = None

class BasicDetailsUpdate(BaseModel):
    phone: str = ""
    email: str = ""
    address: str = ""

# --- API ---
class Notice(BaseModel):
    """Blocking message shown to the operator, acknowledged with OK."""
    title: str
    message: str

class SubmitResponse(BaseModel):
    status: str
    id: Optional[str] = None
    notice: Optional[Notice] = None

class CollectionSnapshot(BaseModel):
    collection: str
    count: int
    limit: Optional[int] = None
    records: List[Dict[str, Any]]

class FacilityAdd(BaseModel):
    facilities: List[str] = []
    value: str = ""

class StagedImage(BaseModel):
    reference: str
    filename: str

class DashboardData(BaseModel):
    counts: Dict[str, int]
    unread_leads: int
