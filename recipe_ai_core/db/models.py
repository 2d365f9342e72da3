"""
Modelos de datos de la aplicación de recetas.

Estructura:
- User: cuenta local (email + contraseña), aprobación y roles.
- Recipe: receta con grupos de ingredientes, instrucciones y tips ordenados.
- Tag / Category: etiquetas y categorías compartidas (muchos-a-muchos).
- Rating: valoración 1..5 de un usuario sobre una receta (una por par).
- ShareToken: link temporal para compartir una receta.
- ShoppingListItem: ítem de la lista de compras de un usuario.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """UTC naive (así lo guarda SQLite)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


recipe_tags = Table(
    "recipe_tags",
    Base.metadata,
    Column("recipe_id", String(36), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

recipe_categories = Table(
    "recipe_categories",
    Base.metadata,
    Column("recipe_id", String(36), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    """
    Usuario del sistema (autenticación/autorización).

    Los usuarios nuevos quedan pendientes de aprobación (`is_approved=False`)
    hasta que un admin los aprueba. Los roles se guardan como string separado
    por comas ("user", "admin", ...).
    """
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(200), unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    password_hash: Mapped[str] = mapped_column(String(255), default="")

    is_approved: Mapped[bool] = mapped_column(Boolean, default=False)
    roles: Mapped[str] = mapped_column(String(200), default="user")
    theme: Mapped[str] = mapped_column(String(20), default="system")  # system|light|dark

    # Reseteo de contraseña
    reset_token: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
    reset_token_expiry: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Relaciones
    recipes: Mapped[list["Recipe"]] = relationship(back_populates="creator", passive_deletes=True)
    ratings: Mapped[list["Rating"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    shopping_items: Mapped[list["ShoppingListItem"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    @property
    def role_list(self) -> list[str]:
        roles = [r.strip() for r in (self.roles or "").split(",") if r.strip()]
        return roles or ["user"]

    @property
    def is_admin(self) -> bool:
        return "admin" in self.role_list


class Recipe(Base):
    """
    Receta de cocina.

    Los arrays anidados (grupos de ingredientes, instrucciones, tips) se
    ordenan por `position`, que refleja el orden que el usuario armó en el
    formulario (incluido el drag-and-drop).
    """
    __tablename__ = "recipes"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(300))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    servings_value: Mapped[int] = mapped_column(Integer, default=1)
    servings_unit: Mapped[str] = mapped_column(String(20), default="servings")  # servings|pieces
    prep_time: Mapped[str | None] = mapped_column(String(100), nullable=True)
    cook_time: Mapped[str | None] = mapped_column(String(100), nullable=True)

    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)  # URL o data URI
    source_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_public: Mapped[bool] = mapped_column(Boolean, default=False)
    created_by: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    # Agregados de valoraciones (se recalculan en cada rate)
    average_rating: Mapped[float | None] = mapped_column(Float, nullable=True)
    num_ratings: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Relaciones
    creator: Mapped["User | None"] = relationship(back_populates="recipes")
    ingredient_groups: Mapped[list["IngredientGroup"]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="IngredientGroup.position",
        passive_deletes=True,
    )
    instructions: Mapped[list["InstructionStep"]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="InstructionStep.position",
        passive_deletes=True,
    )
    tips: Mapped[list["TipStep"]] = relationship(
        back_populates="recipe",
        cascade="all, delete-orphan",
        order_by="TipStep.position",
        passive_deletes=True,
    )
    tags: Mapped[list["Tag"]] = relationship(secondary=recipe_tags, back_populates="recipes")
    categories: Mapped[list["Category"]] = relationship(secondary=recipe_categories, back_populates="recipes")
    ratings: Mapped[list["Rating"]] = relationship(
        back_populates="recipe", cascade="all, delete-orphan", passive_deletes=True
    )
    share_tokens: Mapped[list["ShareToken"]] = relationship(
        back_populates="recipe", cascade="all, delete-orphan", passive_deletes=True
    )


class IngredientGroup(Base):
    """
    Subsección nombrada de la lista de ingredientes (ej: "Para la masa").
    """
    __tablename__ = "ingredient_groups"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(200), default="")
    position: Mapped[int] = mapped_column(Integer, default=0)

    recipe: Mapped["Recipe"] = relationship(back_populates="ingredient_groups")
    ingredients: Mapped[list["Ingredient"]] = relationship(
        back_populates="group",
        cascade="all, delete-orphan",
        order_by="Ingredient.position",
        passive_deletes=True,
    )


class Ingredient(Base):
    """
    Ingrediente. `quantity` es texto libre ("250", "1 1/4", "una pizca").
    """
    __tablename__ = "ingredients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    group_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("ingredient_groups.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(200))
    quantity: Mapped[str] = mapped_column(String(50), default="")
    unit: Mapped[str] = mapped_column(String(50), default="")
    position: Mapped[int] = mapped_column(Integer, default=0)

    group: Mapped["IngredientGroup"] = relationship(back_populates="ingredients")


class InstructionStep(Base):
    __tablename__ = "instruction_steps"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    text: Mapped[str] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, default=0)

    recipe: Mapped["Recipe"] = relationship(back_populates="instructions")


class TipStep(Base):
    __tablename__ = "tip_steps"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    text: Mapped[str] = mapped_column(Text)
    position: Mapped[int] = mapped_column(Integer, default=0)

    recipe: Mapped["Recipe"] = relationship(back_populates="tips")


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    recipes: Mapped[list["Recipe"]] = relationship(secondary=recipe_tags, back_populates="tags")


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(100), unique=True, index=True)

    recipes: Mapped[list["Recipe"]] = relationship(secondary=recipe_categories, back_populates="categories")


class Rating(Base):
    """
    Valoración de un usuario sobre una receta. Un único registro por par.
    """
    __tablename__ = "ratings"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_rating_user_recipe"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), index=True)
    value: Mapped[int] = mapped_column(Integer)

    user: Mapped["User"] = relationship(back_populates="ratings")
    recipe: Mapped["Recipe"] = relationship(back_populates="ratings")


class ShareToken(Base):
    """
    Link temporal de solo lectura para una receta.
    """
    __tablename__ = "share_tokens"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    token: Mapped[str] = mapped_column(String(128), unique=True, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    shared_by: Mapped[str] = mapped_column(String(36))
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.id", ondelete="CASCADE"), index=True)

    recipe: Mapped["Recipe"] = relationship(back_populates="share_tokens")


class ShoppingListItem(Base):
    """
    Ítem de la lista de compras de un usuario.

    `recipe_id` / `recipe_title` son informativos: si la receta se borra,
    el ítem sigue en la lista.
    """
    __tablename__ = "shopping_list_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id", ondelete="CASCADE"), index=True)
    recipe_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    recipe_title: Mapped[str | None] = mapped_column(String(300), nullable=True)

    name: Mapped[str] = mapped_column(String(200))
    quantity: Mapped[str] = mapped_column(String(50), default="")
    unit: Mapped[str] = mapped_column(String(50), default="")
    is_checked: Mapped[bool] = mapped_column(Boolean, default=False)
    position: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    user: Mapped["User"] = relationship(back_populates="shopping_items")
