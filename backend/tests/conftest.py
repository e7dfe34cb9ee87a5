"""
SOHO School Transport - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Dict
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool
from faker import Faker

# Set testing environment
os.environ['ENVIRONMENT'] = 'test'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['JWT_REFRESH_SECRET_KEY'] = 'test-jwt-refresh-secret-key-for-testing'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['SEED_NUMBER_PLATES'] = ''
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['LOG_LEVEL'] = 'WARNING'

from soho_transport.main import app
from soho_transport.core.database import Base, get_db
from soho_transport.core.security import build_token_claims, create_access_token, get_password_hash
from soho_transport.models import NumberPlate, PlateStatus, Student, StudentStatus, User, UserRole

fake = Faker()

TEST_PASSWORD = 'testpassword123'
DRIVER_PLATE = 'KAA 123A'

# Test database setup
TEST_DATABASE_URL = 'sqlite+aiosqlite:///./test.db'
test_engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=NullPool)
TestSessionLocal = async_sessionmaker(
    bind=test_engine,
    class_=AsyncSession,
    expire_on_commit=False
)


def fake_phone() -> str:
    return fake.numerify('07########')


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestSessionLocal() as session:
        yield session
        await session.rollback()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


async def make_user(
    db: AsyncSession,
    role: UserRole,
    number_plate: str = None,
    password: str = TEST_PASSWORD,
) -> User:
    user = User(
        first_name=fake.first_name(),
        last_name=fake.last_name(),
        email=fake.unique.email().lower(),
        phone_number=fake_phone(),
        number_plate=number_plate,
        role=role,
        password_hash=get_password_hash(password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


async def make_student(db: AsyncSession, **overrides) -> Student:
    fields = {
        'admission_number': fake.unique.bothify('ADM-####').upper(),
        'first_name': fake.first_name(),
        'last_name': fake.last_name(),
        'class_name': 'Blue',
        'grade': 'Grade 4',
        'parent_contact': '0712345678',
        'admission_date': fake.date_between(start_date='-2y', end_date='today'),
        'status': StudentStatus.ACTIVE,
    }
    fields.update(overrides)
    student = Student(**fields)
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


def bearer(user: User) -> Dict[str, str]:
    """Authorization header carrying a fresh access token for the user"""
    token = create_access_token(build_token_claims(user.id, user.email, user.role.value))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
async def active_plate(db_session: AsyncSession) -> NumberPlate:
    """Create the plate assigned to the test driver"""
    plate = NumberPlate(plate_number=DRIVER_PLATE, status=PlateStatus.ACTIVE)
    db_session.add(plate)
    await db_session.commit()
    await db_session.refresh(plate)
    return plate


@pytest.fixture
async def driver_user(db_session: AsyncSession, active_plate: NumberPlate) -> User:
    """Create a driver assigned to the active plate"""
    return await make_user(db_session, UserRole.DRIVER, number_plate=active_plate.plate_number)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    """Create a School Admin"""
    return await make_user(db_session, UserRole.SCHOOL_ADMIN)


@pytest.fixture
async def parent_user(db_session: AsyncSession) -> User:
    """Create a Parent"""
    return await make_user(db_session, UserRole.PARENT)


@pytest.fixture
async def student(db_session: AsyncSession) -> Student:
    """Create an active student"""
    return await make_student(db_session)


@pytest.fixture
def admin_headers(admin_user: User) -> Dict[str, str]:
    return bearer(admin_user)


@pytest.fixture
def driver_headers(driver_user: User) -> Dict[str, str]:
    return bearer(driver_user)


@pytest.fixture
def parent_headers(parent_user: User) -> Dict[str, str]:
    return bearer(parent_user)


@pytest.fixture
def sample_registration() -> Callable[..., dict]:
    """Factory for a valid registration body (camelCase, as the frontend sends it)"""
    def build(**overrides) -> dict:
        body = {
            'firstName': fake.first_name(),
            'lastName': fake.last_name(),
            'email': fake.unique.email(),
            'phoneNumber': fake_phone(),
            'role': 'Parent',
            'password': TEST_PASSWORD,
        }
        body.update(overrides)
        return body
    return build


@pytest.fixture
def sample_fuel_request() -> Callable[..., dict]:
    """Factory for a valid Fuel request body for the test driver's plate"""
    def build(**overrides) -> dict:
        body = {
            'requestDate': '2024-05-10',
            'numberPlate': DRIVER_PLATE,
            'currentMileage': 120500,
            'requestType': 'Fuel',
            'requestedBy': fake.name(),
            'category': 'Fuels & Oils',
            'description': 'Diesel top-up for the morning route',
            'amount': 5000,
            'confirmedBy': 'Erick',
        }
        body.update(overrides)
        return body
    return build
