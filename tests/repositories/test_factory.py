from unittest.mock import MagicMock, patch

from billrecon.repositories.factory import get_bill_repository
from billrecon.repositories.sqlalchemy import SQLAlchemyBillRepository


class TestFactory:
    @patch("billrecon.db.get_connection")
    def test_get_bill_repository(self, mock_get_conn):
        mock_get_conn.return_value = MagicMock()
        repo = get_bill_repository()
        assert isinstance(repo, SQLAlchemyBillRepository)
        assert repo.conn is mock_get_conn.return_value
