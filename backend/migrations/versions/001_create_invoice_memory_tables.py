"""Create invoice memory tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 10:00:00.000000

Creates the document tables (invoice, purchase_order, human_correction),
the memory tables (vendor_memory, correction_memory) and the append-only
audit_trail.
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Documents
    op.create_table(
        'invoice',
        sa.Column('invoice_id', sa.Text(), nullable=False),
        sa.Column('vendor', sa.Text(), nullable=False),
        sa.Column('invoice_number', sa.Text(), nullable=False),
        sa.Column('data', postgresql.JSONB(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('invoice_id')
    )
    op.create_index('ix_invoice_vendor_invoice_number', 'invoice', ['vendor', 'invoice_number'])

    op.create_table(
        'purchase_order',
        sa.Column('po_number', sa.Text(), nullable=False),
        sa.Column('vendor', sa.Text(), nullable=False),
        sa.Column('data', postgresql.JSONB(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('po_number')
    )
    op.create_index('ix_purchase_order_vendor', 'purchase_order', ['vendor'])

    op.create_table(
        'human_correction',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_id', sa.Text(), nullable=False),
        sa.Column('vendor', sa.Text(), nullable=False),
        sa.Column('corrections', postgresql.JSONB(), nullable=False),
        sa.Column('final_decision', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('invoice_id'),
        sa.CheckConstraint("final_decision IN ('approved', 'rejected')", name='ck_human_correction_final_decision')
    )

    # Memories
    op.create_table(
        'vendor_memory',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('vendor', sa.Text(), nullable=False),
        sa.Column('key', sa.Text(), nullable=False),
        sa.Column('value', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vendor', 'key', name='uq_vendor_memory_vendor_key')
    )

    # One row per (vendor, field); concurrent learners rely on this constraint
    op.create_table(
        'correction_memory',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('vendor', sa.Text(), nullable=False),
        sa.Column('field', sa.Text(), nullable=False),
        sa.Column('pattern', postgresql.JSONB(), nullable=False),
        sa.Column('suggested_value', postgresql.JSONB(), nullable=True),
        sa.Column('confidence', sa.Numeric(5, 4), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('NOW()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('vendor', 'field', name='uq_correction_memory_vendor_field'),
        sa.CheckConstraint('confidence >= 0 AND confidence <= 1', name='ck_correction_memory_confidence')
    )

    # Audit
    op.create_table(
        'audit_trail',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('invoice_id', sa.Text(), nullable=False),
        sa.Column('step', sa.Text(), nullable=False),
        sa.Column('details', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint("step IN ('recall', 'apply', 'decide', 'learn')", name='ck_audit_trail_step')
    )
    op.create_index('ix_audit_trail_invoice_id', 'audit_trail', ['invoice_id'])


def downgrade():
    op.drop_index('ix_audit_trail_invoice_id', table_name='audit_trail')
    op.drop_table('audit_trail')
    op.drop_table('correction_memory')
    op.drop_table('vendor_memory')
    op.drop_table('human_correction')
    op.drop_index('ix_purchase_order_vendor', table_name='purchase_order')
    op.drop_table('purchase_order')
    op.drop_index('ix_invoice_vendor_invoice_number', table_name='invoice')
    op.drop_table('invoice')
