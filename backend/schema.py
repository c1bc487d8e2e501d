import json
from sqlalchemy import Column, Integer, String, Numeric, Text, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship
from base import Base


class League(Base):
    __tablename__ = 'leagues'
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime)


class Team(Base):
    __tablename__ = 'teams'
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    league_id = Column(Integer, ForeignKey('leagues.id'), nullable=False)
    image1 = Column(String)
    image2 = Column(String)
    price = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime)

    league = relationship("League")
    stock = relationship("ProductStock", order_by="ProductStock.id")


class ProductStock(Base):
    __tablename__ = 'product_stock'
    __table_args__ = (UniqueConstraint('team_id', 'size'),)
    id = Column(Integer, primary_key=True)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=False)
    size = Column(String, nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)


class Profile(Base):
    __tablename__ = 'profiles'
    id = Column(String, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    full_name = Column(String, nullable=False)
    phone = Column(String)
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime)


class CartItem(Base):
    __tablename__ = 'cart_items'
    __table_args__ = (UniqueConstraint('profile_id', 'team_id', 'size'),)
    id = Column(Integer, primary_key=True)
    profile_id = Column(String, ForeignKey('profiles.id'), nullable=False)
    team_id = Column(Integer, ForeignKey('teams.id'), nullable=False)
    size = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    added_at = Column(DateTime)

    team = relationship("Team")


class Order(Base):
    __tablename__ = 'orders'
    id = Column(Integer, primary_key=True)
    profile_id = Column(String, ForeignKey('profiles.id'), nullable=False)
    created_at = Column(DateTime, nullable=False)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=False)
    customer_phone = Column(String)
    delivery_address = Column(Text, nullable=False)
    items = Column(Text, nullable=False)
    subtotal = Column(Numeric(12, 4), nullable=False)
    discount = Column(Numeric(12, 4), nullable=False)
    total_amount = Column(Numeric(12, 4), nullable=False)
    status = Column(String, nullable=False)
    payment_method = Column(String, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'profile_id': self.profile_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'customer_name': self.customer_name,
            'customer_email': self.customer_email,
            'customer_phone': self.customer_phone,
            'delivery_address': json.loads(self.delivery_address) if self.delivery_address else None,
            'items': json.loads(self.items) if self.items else [],
            'subtotal': str(self.subtotal),
            'discount': str(self.discount),
            'total_amount': str(self.total_amount),
            'status': self.status,
            'payment_method': self.payment_method,
        }
