import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, Float, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _uuid() -> str:
    return str(uuid.uuid4())


class AuditMixin:
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)


class Account(AuditMixin, Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    avatar = Column(String, nullable=True)
    role = Column(String, nullable=False, default="viewer", index=True)
    status = Column(String, nullable=False, default="ativo", index=True)
    access_scope = Column(String, nullable=False, default="cliente-especifico")
    permissions = Column(JSON, nullable=False, default=dict)
    failed_login_attempts = Column(Integer, nullable=False, default=0)
    locked_until = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)
    created_by = Column(String, ForeignKey("users.id"), nullable=True)

    client_links = relationship(
        "AccountClient",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    @property
    def client_ids(self) -> list[str]:
        return [link.client_id for link in self.client_links]

    @client_ids.setter
    def client_ids(self, client_ids) -> None:
        current = {link.client_id: link for link in self.client_links}
        self.client_links = [
            current.get(client_id) or AccountClient(client_id=client_id)
            for client_id in dict.fromkeys(str(value) for value in client_ids or [])
        ]


class AccountClient(Base):
    __tablename__ = "account_clients"
    __table_args__ = (UniqueConstraint("account_id", "client_id", name="uq_account_client"),)

    id = Column(String, primary_key=True, default=_uuid)
    account_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    client_id = Column(String, ForeignKey("clients.id"), nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    account = relationship("Account", back_populates="client_links")


class Client(AuditMixin, Base):
    __tablename__ = "clients"

    id = Column(String, primary_key=True, default=_uuid)
    name = Column(String(100), nullable=False)
    email = Column(String, nullable=False, index=True)
    phone = Column(String, nullable=True)
    tax_id = Column(String, nullable=True, index=True)
    address = Column(JSON, nullable=True)
    production_type = Column(String, nullable=True)
    total_area = Column(Float, nullable=True)
    status = Column(String, nullable=False, default="ativo")

    properties = relationship("Property", back_populates="client")
    areas = relationship("Area", back_populates="client")


class Property(AuditMixin, Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True, default=_uuid)
    client_id = Column(String, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    country = Column(String(2), nullable=False, default="BR")
    state = Column(String(2), nullable=False, index=True)
    municipality = Column(String, nullable=False)
    address = Column(String, nullable=True)
    postal_code = Column(String, nullable=True)
    geometry = Column(JSON, nullable=False)
    srid = Column(Integer, nullable=False, default=4326)
    total_area_ha = Column(Float, nullable=False)
    centroid = Column(JSON, nullable=True)
    status = Column(String, nullable=False, default="ativa", index=True)
    operation_start_date = Column(Date, nullable=True)
    tenure_regime = Column(String, nullable=False, default="propria")
    display_owner = Column(String, nullable=True)
    contract_start = Column(Date, nullable=True)
    contract_end = Column(Date, nullable=True)
    contract_identifier = Column(String, nullable=True)
    car = Column(String, nullable=True, index=True)
    ccir = Column(String, nullable=True)
    manager_name = Column(String, nullable=True)
    manager_contact = Column(String, nullable=True)
    created_by = Column(String, ForeignKey("users.id"), nullable=True)
    updated_by = Column(String, ForeignKey("users.id"), nullable=True)

    client = relationship("Client", back_populates="properties")


class Area(AuditMixin, Base):
    __tablename__ = "areas"

    id = Column(String, primary_key=True, default=_uuid)
    client_id = Column(String, ForeignKey("clients.id"), nullable=False, index=True)
    property_id = Column(String, ForeignKey("properties.id"), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    size = Column(Float, nullable=False)
    unit = Column(String, nullable=False, default="hectares")
    location = Column(JSON, nullable=False)
    soil_type = Column(String, nullable=True)
    irrigated = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="ativa")

    client = relationship("Client", back_populates="areas")
    crops = relationship("Crop", back_populates="area")


class Crop(AuditMixin, Base):
    __tablename__ = "crops"

    id = Column(String, primary_key=True, default=_uuid)
    area_id = Column(String, ForeignKey("areas.id"), nullable=False, index=True)
    client_id = Column(String, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    variety = Column(String, nullable=True)
    planted_on = Column(Date, nullable=False)
    harvested_on = Column(Date, nullable=True)
    stage = Column(String, nullable=False, default="plantada")
    yield_amount = Column(Float, nullable=True)
    notes = Column(Text, nullable=True)

    area = relationship("Area", back_populates="crops")


class Pest(AuditMixin, Base):
    __tablename__ = "pests"

    id = Column(String, primary_key=True, default=_uuid)
    crop_id = Column(String, ForeignKey("crops.id"), nullable=False, index=True)
    area_id = Column(String, ForeignKey("areas.id"), nullable=False)
    client_id = Column(String, ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(100), nullable=False)
    kind = Column(String, nullable=False)
    severity = Column(String, nullable=False, default="media")
    detected_on = Column(Date, nullable=False)
    resolved_on = Column(Date, nullable=True, index=True)
    affected_area = Column(Float, nullable=True)
    treatment = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)


class Loss(AuditMixin, Base):
    __tablename__ = "losses"

    id = Column(String, primary_key=True, default=_uuid)
    crop_id = Column(String, ForeignKey("crops.id"), nullable=False, index=True)
    pest_id = Column(String, ForeignKey("pests.id"), nullable=True)
    area_id = Column(String, ForeignKey("areas.id"), nullable=False)
    client_id = Column(String, ForeignKey("clients.id"), nullable=False, index=True)
    kind = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)
    quantity = Column(Float, nullable=False, default=0)
    unit = Column(String, nullable=True)
    estimated_value = Column(Float, nullable=False, default=0)
    occurred_on = Column(Date, nullable=False, index=True)
    preventive_measure = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
