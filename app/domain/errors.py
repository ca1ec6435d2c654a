# app/domain/errors.py


class InputError(ValueError):
    """Niepoprawne dane wejsciowe (blad wywolujacego), np. ujemna cena."""


class UnsupportedCouponType(ValueError):
    """Typ kuponu, ktorego silnik cenowy nie obsluguje (np. fixed_product)."""


class InferenceTierFailure(Exception):
    """Pojedynczy poziom wykrywania stawki VAT nie dal wyniku.

    Nigdy nie wychodzi poza TaxRateInference - powoduje przejscie
    do nastepnego poziomu.
    """


class TaxRateUnavailable(Exception):
    """Zaden poziom (lacznie ze stala awaryjna) nie zwrocil stawki."""
