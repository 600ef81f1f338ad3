from typing import Optional

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CompanySettings(BaseModel):
    """Issuer profile printed on every invoice. Read-only to the invoice core."""
    company_name: str = "Happy Greeting"
    tagline: str = "Memories in Ink, Emotions on Paper"
    logo_url: Optional[str] = ""  # Base64 data URL or plain URL
    office_address: str = "18a, 4th Lane, Nungambakkam High Rd,\nChennai, Tamil Nadu 600034"
    office_phone: str = "8668142294"
    email: str = "happygreetingtoyou@gmail.com"  # free text, may be blank
    msme_no: str = "UDYAM-TN-02-0037689"
    upi_id: str = "9092078319@okbizaxis"
    footer_message: Optional[str] = "Thank you for shopping with Happy Greeting!"
    sub_footer_message: Optional[str] = "Please visit us again."
    google_review_url: Optional[str] = "https://g.page/r/CWwRZhiMQy2xEBM/review"

    class Config:
        alias_generator = to_camel
        populate_by_name = True
