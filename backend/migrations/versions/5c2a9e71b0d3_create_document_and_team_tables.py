"""create document and team tables

Revision ID: 5c2a9e71b0d3
Revises:
Create Date: 2026-10-18 00:00:00
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '5c2a9e71b0d3'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    insp = sa.inspect(bind)
    tables = set(insp.get_table_names())
    if 'document' not in tables:
        op.create_table(
            'document',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('collection', sa.String(length=64), nullable=False),
            sa.Column('doc_id', sa.String(length=128), nullable=False),
            sa.Column('data', sa.JSON(), nullable=False),
            sa.UniqueConstraint('collection', 'doc_id', name='uq_document_path'),
        )
        op.create_index('ix_document_collection', 'document', ['collection'])
    if 'team' not in tables:
        op.create_table(
            'team',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('team_number', sa.Integer(), nullable=False),
            sa.Column('team_name', sa.String(length=64), nullable=False),
            sa.Column('score', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('shields', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('team_class', sa.Integer(), nullable=True),
            sa.Column('role', sa.String(length=32), nullable=True),
        )
        op.create_index('ix_team_team_number', 'team', ['team_number'], unique=True)


def downgrade():
    op.drop_index('ix_team_team_number', table_name='team')
    op.drop_table('team')
    op.drop_index('ix_document_collection', table_name='document')
    op.drop_table('document')
