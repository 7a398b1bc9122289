"""Shared fixtures for application tests."""

import os
import shutil
import tempfile
from typing import Any, Dict, Optional
from unittest import TestCase, mock

from advocate import domain
from advocate.auth import tokens
from advocate.factory import create_web_app
from advocate.services import users
from advocate.services.database import db, DBUser

SECRET = 'foosecret'

TEST_ENVIRON = {
    'JWT_SECRET': SECRET,
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'CREATE_DB': '1',
    'ENVIRONMENT': 'test',
    'LOGLEVEL': '40',
    'RATE_LIMIT_BACKEND': 'memory',
    'GLOBAL_RATE_LIMIT_MAX': '0',
    'USER_RATE_LIMIT_MAX': '100',
    'USER_RATE_LIMIT_WINDOW': '900',
    'RISK_STRICT_FACTORS': '0',
}


class AppTestCase(TestCase):
    """Runs each test against a fresh app with an in-memory database."""

    environ: Dict[str, str] = {}

    def setUp(self) -> None:
        self.upload_folder = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.upload_folder, ignore_errors=True)
        environ = dict(TEST_ENVIRON, UPLOAD_FOLDER=self.upload_folder)
        environ.update(self.environ)
        patcher = mock.patch.dict(os.environ, environ)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.app = create_web_app()
        self.client = self.app.test_client()

    def tearDown(self) -> None:
        with self.app.app_context():
            db.session.remove()
            db.drop_all()

    def make_user(self, profile_name: str = 'alice',
                  email: Optional[str] = None,
                  password: Optional[str] = None, role: str = 'user',
                  plan: str = 'free', active: bool = True) -> domain.User:
        """Create a user directly in the database."""
        with self.app.app_context():
            user = users.create_user(profile_name, email=email,
                                     password=password)
            db_user = db.session.get(DBUser, int(user.user_id))
            db_user.role = role
            db_user.plan = plan
            db_user.is_active = active
            db.session.commit()
            return users.find_by_id(user.user_id) or user

    def headers_for(self, user: Any, **extra: str) -> Dict[str, str]:
        token = tokens.encode(user.user_id, SECRET, 3600)
        headers = {'Authorization': f'Bearer {token}'}
        headers.update(extra)
        return headers
