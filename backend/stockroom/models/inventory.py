from __future__ import annotations

from ..extensions import db
from ..records import ProductRecord
from stockroom.time_utils import to_naive_utc


class Product(db.Model):
    """
    Product master.

    Names are uppercase and unique across the whole inventory; the UNIQUE
    constraint is the authoritative duplicate guard under concurrent writes.
    sale_price is always derived from purchase_price and profit_margin by
    pricing_service before a row is written.
    """
    __tablename__ = "products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, unique=True, index=True)
    barcode = db.Column(db.String(64), nullable=True)

    purchase_price = db.Column(db.Numeric(10, 2), nullable=False)
    sale_price = db.Column(db.Numeric(12, 2), nullable=False)
    profit_margin = db.Column(db.Numeric(5, 2), nullable=False, default=20)

    buyer_name = db.Column(db.String(255), nullable=True)
    stock = db.Column(db.Integer, nullable=True, default=0)
    min_stock = db.Column(db.Integer, nullable=True, default=0)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"

    def to_record(self) -> ProductRecord:
        return ProductRecord(
            id=self.id,
            name=self.name,
            barcode=self.barcode,
            purchase_price=self.purchase_price,
            sale_price=self.sale_price,
            profit_margin=self.profit_margin,
            buyer_name=self.buyer_name,
            stock=self.stock,
            min_stock=self.min_stock,
            created_at=to_naive_utc(self.created_at),
            updated_at=to_naive_utc(self.updated_at),
        )
