"""Create users, books and book_tags tables

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.String(length=24), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False, comment="User's display name"),
        sa.Column('email', sa.String(length=255), nullable=False, comment='Login email, matched exactly'),
        sa.Column('hashed_password', sa.String(length=255), nullable=False, comment='Bcrypt hashed password'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, comment='Signup time (UTC)'),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, comment='Last profile change (UTC)'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('books',
        sa.Column('id', sa.String(length=24), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False, comment='Book title'),
        sa.Column('author', sa.String(length=100), nullable=False, comment='Author name'),
        sa.Column('status', sa.String(length=20), nullable=False, comment='want-to-read, reading or completed'),
        sa.Column('notes', sa.Text(), nullable=False, comment='Personal notes (max 1000 characters)'),
        sa.Column('owner_id', sa.String(length=24), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_books_owner_id'), 'books', ['owner_id'], unique=False)
    op.create_index('ix_books_owner_status', 'books', ['owner_id', 'status'], unique=False)
    op.create_index('ix_books_owner_created_at', 'books', ['owner_id', 'created_at'], unique=False)
    op.create_index('ix_books_owner_author', 'books', ['owner_id', 'author'], unique=False)

    op.create_table('book_tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('book_id', sa.String(length=24), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False, comment='Lowercase, trimmed tag'),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_book_tags_book_id'), 'book_tags', ['book_id'], unique=False)
    op.create_index(op.f('ix_book_tags_name'), 'book_tags', ['name'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_book_tags_name'), table_name='book_tags')
    op.drop_index(op.f('ix_book_tags_book_id'), table_name='book_tags')
    op.drop_table('book_tags')
    op.drop_index('ix_books_owner_author', table_name='books')
    op.drop_index('ix_books_owner_created_at', table_name='books')
    op.drop_index('ix_books_owner_status', table_name='books')
    op.drop_index(op.f('ix_books_owner_id'), table_name='books')
    op.drop_table('books')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
