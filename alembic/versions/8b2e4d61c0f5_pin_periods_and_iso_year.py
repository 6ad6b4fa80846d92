"""pin periods and iso year on pins

Revision ID: 8b2e4d61c0f5
Revises: 3f1c9a2b7d40
Create Date: 2025-10-20 10:41:07.518233

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b2e4d61c0f5'
down_revision: Union[str, None] = '3f1c9a2b7d40'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        'pin_periods',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('month', sa.Integer(), nullable=True),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_completed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # existing pins stored the ISO year in "year"; keep it as iso_year and
    # derive the calendar year and day from given_at
    with op.batch_alter_table('employee_pins') as batch:
        batch.add_column(sa.Column('iso_year', sa.Integer(), nullable=True))
        batch.add_column(sa.Column('given_date', sa.Date(), nullable=True))
        batch.drop_constraint('uq_pin_giver_receiver_week', type_='unique')
    op.execute(
        "UPDATE employee_pins SET iso_year = year, given_date = CAST(given_at AS DATE)"
    )
    op.execute(
        "UPDATE employee_pins SET year = EXTRACT(YEAR FROM given_date), month = EXTRACT(MONTH FROM given_date)"
    )
    with op.batch_alter_table('employee_pins') as batch:
        batch.alter_column('iso_year', nullable=False)
        batch.alter_column('given_date', nullable=False)
        batch.create_unique_constraint(
            'uq_pin_giver_receiver_week', ['giver_id', 'receiver_id', 'week_number', 'iso_year']
        )

    with op.batch_alter_table('weekly_pin_allowance') as batch:
        batch.drop_constraint('uq_allowance_user_week', type_='unique')
        batch.alter_column('year', new_column_name='iso_year')
        batch.create_unique_constraint('uq_allowance_user_week', ['user_id', 'week_number', 'iso_year'])


def downgrade():
    with op.batch_alter_table('weekly_pin_allowance') as batch:
        batch.drop_constraint('uq_allowance_user_week', type_='unique')
        batch.alter_column('iso_year', new_column_name='year')
        batch.create_unique_constraint('uq_allowance_user_week', ['user_id', 'week_number', 'year'])

    op.execute("UPDATE employee_pins SET year = iso_year")
    with op.batch_alter_table('employee_pins') as batch:
        batch.drop_constraint('uq_pin_giver_receiver_week', type_='unique')
        batch.drop_column('given_date')
        batch.drop_column('iso_year')
        batch.create_unique_constraint(
            'uq_pin_giver_receiver_week', ['giver_id', 'receiver_id', 'week_number', 'year']
        )

    op.drop_table('pin_periods')
