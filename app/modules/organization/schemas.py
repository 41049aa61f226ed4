from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union


class OrganizationUpdate(BaseModel):
    """Organization settings form; accepts camelCase (companyName) or snake_case keys."""
    company_name: Optional[str] = None
    legal_name: Optional[str] = None
    tax_id: Optional[str] = None
    license_number: Optional[str] = None
    founded_year: Optional[Union[int, str]] = None
    company_type: Optional[str] = None
    logo_url: Optional[str] = None
    main_phone: Optional[str] = None
    main_email: Optional[str] = None
    support_email: Optional[str] = None
    website: Optional[str] = None
    street_address: Optional[str] = None
    suite: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    number_of_employees: Optional[Union[int, str]] = None
    annual_revenue: Optional[str] = None
    primary_industry: Optional[str] = None
    secondary_industries: Optional[List[str]] = None
    certifications: Optional[List[str]] = None
    billing_address: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_zip: Optional[str] = None
    payment_method: Optional[str] = None
    billing_email: Optional[str] = None
    timezone: Optional[str] = None
    date_format: Optional[str] = None
    currency: Optional[str] = None
    language: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
