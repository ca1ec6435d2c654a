import os

#przed importem app.* - settings czytane przy imporcie
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["HTTP_RETRY_ATTEMPTS"] = "1"
os.environ["TAX_RATE_CACHE_BACKEND"] = "memory"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.data import models  # noqa: F401
from app.data.database import Base, SessionLocal, engine
from app.services.order_sync_service import OrderSyncService
from app.services.tax_cache import TaxRateCache
from app.services.tax_inference import TaxRateInference
from app.services.tax_rate_service import TaxRateService
from app.services.woocommerce_client import TaxRateRecord
from tests.fakes import FakeCatalog, coupon_record, product


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def catalog():
    return FakeCatalog(
        products={
            1: product(1, "118.00", name="Notebook", sku="NB-1", barcode="5901234123457"),
            2: product(2, "59.00", sale="50.00", name="Pen set"),
            3: product(3, "1000.00", name="Chair"),
        },
        tax_rates=[TaxRateRecord(rate="18.0000", tax_class="")],
        coupons={
            "TEN": coupon_record("TEN", "percentage", "10"),
            "FLAT50": coupon_record("FLAT50", "fixed_cart", "50"),
            "BIG500": coupon_record("BIG500", "percentage", "10", minimum="500"),
            "HALF": coupon_record("HALF", "percentage", "50", maximum="100"),
        },
    )


@pytest.fixture
def tax_rate_service(catalog):
    return TaxRateService(TaxRateInference(catalog), TaxRateCache(ttl_seconds=0))


@pytest.fixture
def scheduled(monkeypatch):
    calls = []
    monkeypatch.setattr(OrderSyncService, "schedule", staticmethod(calls.append))
    return calls


@pytest.fixture
def client(catalog, tax_rate_service, scheduled):
    app = create_app(catalog=catalog, tax_rate_service=tax_rate_service)
    with TestClient(app) as c:
        yield c
