from billrecon.repositories.base import BillRepository


def get_bill_repository() -> BillRepository:
    from billrecon.db import get_connection
    from billrecon.repositories.sqlalchemy import SQLAlchemyBillRepository

    return SQLAlchemyBillRepository(get_connection())
