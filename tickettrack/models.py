from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .db import Base


class Game(Base):
    __tablename__ = "games"
    __table_args__ = (
        UniqueConstraint("start_time", name="uq_games_start_time"),
    )

    id = Column(Integer, primary_key=True, index=True)
    home_team = Column(String, nullable=False, default="")
    away_team = Column(String, nullable=False, default="")
    start_time = Column(DateTime(timezone=True), nullable=False)
    venue = Column(String, nullable=False, default="")
    city = Column(String, nullable=False, default="")
    state = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    ticket_app_urls = relationship(
        "TicketAppUrl",
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="TicketAppUrl.id",
    )
    ticket_quantity_groups = relationship(
        "TicketQuantityGroup",
        back_populates="game",
        cascade="all, delete-orphan",
        order_by="TicketQuantityGroup.quantity",
    )


class TicketAppUrl(Base):
    __tablename__ = "ticket_app_urls"
    __table_args__ = (
        UniqueConstraint("game_id", "app", name="uq_ticket_app_urls_game_app"),
    )

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False)
    app = Column(String, nullable=False)          # TicketAppName value
    event_url = Column(String, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    game = relationship("Game", back_populates="ticket_app_urls")


class TicketQuantityGroup(Base):
    __tablename__ = "ticket_quantity_groups"
    __table_args__ = (
        UniqueConstraint("game_id", "quantity", name="uq_ticket_quantity_groups_game_quantity"),
    )

    id = Column(Integer, primary_key=True, index=True)
    game_id = Column(Integer, ForeignKey("games.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=True)

    game = relationship("Game", back_populates="ticket_quantity_groups")
    tickets = relationship(
        "Ticket",
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="Ticket.id",
    )


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    # Null only between insert and attachment to a group, inside one transaction.
    group_id = Column(Integer, ForeignKey("ticket_quantity_groups.id"), nullable=True)
    section = Column(Integer, nullable=False)
    row = Column(Integer, nullable=False)
    price = Column(Integer, nullable=False)       # whole USD
    quantity = Column(Integer, nullable=False)
    app = Column(String, nullable=False)
    link = Column(String, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    group = relationship("TicketQuantityGroup", back_populates="tickets")


class AppSettings(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, primary_key=True)
    scrape_timeout_seconds = Column(Integer, nullable=False, default=90)
    default_ticket_quantity = Column(Integer, nullable=False, default=2)
    auto_ingest_enabled = Column(Boolean, nullable=False, default=True)
    enabled_ticket_apps = Column(String, nullable=False, default="tickpick,gametime")
    updated_at_utc = Column(DateTime(timezone=True), server_default=func.now())
