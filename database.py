from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import create_engine, Column, Integer, String, DateTime, JSON, UniqueConstraint
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from config import settings
from generator import AdminGenerator
from logging_config import get_logger
from models import LicenseStructParameters

logger = get_logger(__name__)

engine = create_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

def _utcnow():
    return datetime.now(timezone.utc)

# Database Models
class GeneratorIVSet(Base):
    """
    One persisted IV set. A product gets a new epoch every time its IVs are
    regenerated; licenses are only valid against the epoch that issued them.
    """
    __tablename__ = "generator_iv_sets"
    __table_args__ = (UniqueConstraint("product", "epoch", name="uq_product_epoch"),)

    id = Column(Integer, primary_key=True, index=True)
    product = Column(String(100), nullable=False, index=True)
    epoch = Column(Integer, nullable=False)

    # License Structure
    seed_length = Column(Integer, nullable=False)
    payload_length = Column(Integer, nullable=False)
    chunk_size = Column(Integer, nullable=False)

    # Secret IVs, base64 encoded, in payload order
    ivs = Column(JSON, nullable=False)

    created_at = Column(DateTime, default=_utcnow)

    def to_generator(self) -> AdminGenerator:
        return AdminGenerator.from_dict({
            "parameters": {
                "seed_length": self.seed_length,
                "payload_length": self.payload_length,
                "chunk_size": self.chunk_size
            },
            "ivs": self.ivs
        })

def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)

def _latest(db: Session, product: str) -> Optional[GeneratorIVSet]:
    return db.query(GeneratorIVSet).filter(
        GeneratorIVSet.product == product
    ).order_by(GeneratorIVSet.epoch.desc()).first()

def save_generator(db: Session, product: str, generator: AdminGenerator) -> int:
    """
    Persist a generator's IV set as the next epoch of ``product``.
    """
    latest = _latest(db, product)
    epoch = latest.epoch + 1 if latest else 1
    data = generator.to_dict()

    row = GeneratorIVSet(
        product=product,
        epoch=epoch,
        ivs=data["ivs"],
        **data["parameters"]
    )
    db.add(row)
    db.commit()

    logger.info("Stored IV set", extra={"product": product, "epoch": epoch})
    return epoch

def load_generator(db: Session, product: str, epoch: Optional[int] = None) -> Optional[AdminGenerator]:
    """
    Load the latest IV set of ``product``, or a specific epoch.
    """
    if epoch is None:
        row = _latest(db, product)
    else:
        row = db.query(GeneratorIVSet).filter(
            GeneratorIVSet.product == product,
            GeneratorIVSet.epoch == epoch
        ).first()

    if row is None:
        return None
    return row.to_generator()

def get_or_create_generator(
    db: Session,
    product: str,
    parameters: LicenseStructParameters
) -> AdminGenerator:
    """
    Get the current generator of ``product`` or create and store one.
    """
    generator = load_generator(db, product)

    if generator:
        if generator.parameters != parameters:
            raise ValueError(
                f"stored IV set for {product!r} uses {generator.parameters}, "
                f"not the requested {parameters}"
            )
        return generator

    generator = AdminGenerator.new_with_random_ivs(parameters)
    save_generator(db, product, generator)
    return generator
