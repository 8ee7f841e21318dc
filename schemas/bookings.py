from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict, model_validator

from models.booking import IdTypeEnum, PaymentModeEnum
from utils.booking_engine import BookingDraft, BookingSource, SourceKind


class BookingCreate(BaseModel):
    """Formulario de recepción; room/name se validan en el motor, no acá"""
    room: Optional[str] = None
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    id_type: Optional[IdTypeEnum] = Field(IdTypeEnum.AADHAR, alias="idType")
    id_number: Optional[str] = Field(None, alias="idNumber")
    file_base64: Optional[str] = Field(None, alias="fileBase64")  # data URL de un scan nuevo
    file_ext: Optional[str] = Field(None, alias="fileExt")
    saved_file_path: Optional[str] = Field(None, alias="savedFilePath")
    check_in: Optional[datetime] = Field(None, alias="checkIn")
    check_out: Optional[datetime] = Field(None, alias="checkOut")
    days: Optional[int] = None
    rent: Optional[Decimal] = Field(None, ge=0)
    advance: Decimal = Field(Decimal("0"), ge=0)
    commission: Decimal = Field(Decimal("0"), ge=0)
    source_type: SourceKind = Field(SourceKind.WALK_IN, alias="sourceType")
    source_name: str = Field("", alias="sourceName")
    payment_mode: Optional[PaymentModeEnum] = Field(PaymentModeEnum.CASH, alias="paymentMode")
    payment_ref: Optional[str] = Field(None, alias="paymentRef")

    model_config = ConfigDict(populate_by_name=True)

    def to_draft(self) -> BookingDraft:
        return BookingDraft(
            room=self.room,
            name=self.name,
            check_in=self.check_in,
            check_out=self.check_out,
            days=self.days,
            rent=self.rent,
            advance=self.advance,
            commission=self.commission,
            source_type=self.source_type,
            source_name=self.source_name,
            mobile=self.mobile,
            email=self.email,
            id_type=self.id_type.value if self.id_type else None,
            id_number=self.id_number,
            payment_mode=self.payment_mode.value if self.payment_mode else None,
            payment_ref=self.payment_ref,
        )


class BookingConflictRead(BaseModel):
    id: Optional[int] = None
    name: str
    room: str
    check_in: datetime = Field(..., alias="checkIn")
    check_out: datetime = Field(..., alias="checkOut")
    message: str

    model_config = ConfigDict(populate_by_name=True)


class BookingPreview(BaseModel):
    """Resultado del motor sin persistir"""
    room: str
    name: str
    check_in: datetime = Field(..., alias="checkIn")
    check_out: datetime = Field(..., alias="checkOut")
    days: int
    rent: Decimal
    advance: Decimal
    total: Decimal
    due: Decimal
    commission: Decimal
    ref_by: str = Field(..., alias="refBy")
    overpaid: bool = False
    conflict: Optional[BookingConflictRead] = None
    warnings: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)


class BookingRead(BaseModel):
    id: int
    room: str
    name: str
    mobile: Optional[str] = None
    email: Optional[str] = None
    id_type: Optional[str] = Field(None, alias="idType")
    id_number: Optional[str] = Field(None, alias="idNumber")
    document_path: Optional[str] = Field(None, alias="fileBase64")  # ruta ya guardada, no el blob
    document_ext: Optional[str] = Field(None, alias="fileExt")
    check_in: datetime = Field(..., alias="checkIn")
    check_out: datetime = Field(..., alias="checkOut")
    days: int
    rent: Decimal
    advance: Decimal
    total: Decimal
    due: Decimal
    commission: Decimal
    payment_mode: Optional[str] = Field(None, alias="paymentMode")
    payment_ref: Optional[str] = Field(None, alias="paymentRef")
    ref_by: str = Field(..., alias="refBy")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    # Campos calculados para el formulario de edición
    source_type: Optional[SourceKind] = Field(None, alias="sourceType")
    source_name: Optional[str] = Field(None, alias="sourceName")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @model_validator(mode="after")
    def completar_origen(self):
        source = BookingSource.parse(self.ref_by)
        self.source_type = source.kind
        self.source_name = source.name
        return self


class GuestProfile(BaseModel):
    name: Optional[str] = None
    mobile: Optional[str] = None
    email: Optional[str] = None
    id_type: Optional[str] = Field(None, alias="idType")
    id_number: Optional[str] = Field(None, alias="idNumber")
    document_path: Optional[str] = Field(None, alias="savedFilePath")

    model_config = ConfigDict(populate_by_name=True)


class InvoiceEmailRequest(BaseModel):
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    pdf_base64: str = Field(..., alias="pdfBase64")
    file_name: Optional[str] = Field(None, alias="fileName")

    model_config = ConfigDict(populate_by_name=True)


class OperationResult(BaseModel):
    success: bool
    message: str
    id: Optional[int] = None
    document_path: Optional[str] = Field(None, alias="savedFilePath")

    model_config = ConfigDict(populate_by_name=True)
