"""
Client provides access to the Postcode.nl address API using httpx.

Attributes:
    SERVER_URL (str): Base URL every API path is appended to.
    SESSION_HEADER_KEY (str): Header carrying the autocomplete session id.

Methods:
    __init__(key, secret, platform, *, referer=None, transport=None):
        Creates the underlying httpx client with basic auth, fixed timeouts
        and the User-Agent built from the platform label. Header values are
        sent UTF-8 encoded, so non-ASCII platform labels and referers work.

    international_autocomplete(), international_get_details(), ...:
        One method per API operation. Each validates and encodes its own
        inputs and returns the decoded JSON object or array.

    response_headers, last_url, last_status_code:
        Headers, url and status of the most recent call. Header names are
        lower-cased and mapped to the list of received values.

    close():
        Closes the underlying httpx client.

    __enter__() / __exit__(exc_type, exc, tb):
        Enables use of Client as a context manager.

Functions:
    is_valid_dutch_postcode_format(postcode: str) -> bool
    validate_session_value(session: str)

(c) Passlick Development 2025. All rights reserved.
"""


from __future__ import annotations

import logging
import platform as _platform
import re
import time
from typing import Any, Dict, List, Sequence

import httpx

from . import __version__
from .encoding import build_form, build_path, build_query
from .errors import ApiError, ErrorKind
from .response import ApiResult, interpret_response

logger = logging.getLogger(__name__)

SERVER_URL = "https://api.postcode.eu/"
SESSION_HEADER_KEY = "X-Autocomplete-Session"
SESSION_VALUE_PATTERN = re.compile(r"^[A-Za-z0-9\-_.]{8,64}$")
DUTCH_POSTCODE_PATTERN = re.compile(r"^[1-9][0-9]{3}\s?[A-Za-z]{2}$")
CLIENT_NAME = "PostcodeNl_Api_Client"
CONNECT_TIMEOUT = 2.0
TIMEOUT = 5.0


def is_valid_dutch_postcode_format(postcode: str) -> bool:
    """Check the 1234AB format; the first digit cannot be zero."""
    return DUTCH_POSTCODE_PATTERN.fullmatch(postcode) is not None


def validate_session_value(session: str) -> None:
    # fullmatch so a trailing newline is not accepted
    if SESSION_VALUE_PATTERN.fullmatch(session) is None:
        raise ApiError(
            ErrorKind.INVALID_SESSION_VALUE,
            f"Session value `{session}` does not conform to `{SESSION_VALUE_PATTERN.pattern}`, "
            "please refer to the API documentation for further information.",
        )


def _checked_postcode(postcode: str) -> str:
    postcode = postcode.strip()
    if not is_valid_dutch_postcode_format(postcode):
        raise ApiError(
            ErrorKind.INVALID_POSTCODE,
            f"Postcode `{postcode}` has an invalid format, it should be in the format `1234AB`.",
        )
    return postcode


class Client:
    def __init__(
        self,
        key: str,
        secret: str,
        platform: str,
        *,
        referer: str | None = None,
        transport: httpx.BaseTransport | None = None,
        base_url: str = SERVER_URL,
    ):
        self._key = key
        self._secret = secret
        self._platform = platform
        self._base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.referer = referer
        self._response_headers: Dict[str, List[str]] = {}
        self.last_url: str | None = None
        self.last_status_code: int | None = None
        try:
            self._client = httpx.Client(
                auth=httpx.BasicAuth(key, secret),
                timeout=httpx.Timeout(TIMEOUT, connect=CONNECT_TIMEOUT),
                headers={"User-Agent": self.user_agent.encode("utf-8")},
                transport=transport,
            )
        except OSError as e:
            raise ApiError(
                ErrorKind.TRANSPORT_UNAVAILABLE,
                f"Cannot use the Postcode.nl API client, no usable HTTP transport: {e}",
                error_code=type(e).__name__,
            ) from e

    @property
    def platform(self) -> str:
        return self._platform

    @property
    def user_agent(self) -> str:
        return (
            f"{self._platform} {CLIENT_NAME}/{__version__} "
            f"Python/{_platform.python_version()}"
        )

    @property
    def response_headers(self) -> Dict[str, List[str]]:
        return {name: list(values) for name, values in self._response_headers.items()}

    def get_api_call_response_headers(self) -> Dict[str, List[str]]:
        """Response headers received in the most recent API call."""
        return self.response_headers

    def is_valid_dutch_postcode_format(self, postcode: str) -> bool:
        return is_valid_dutch_postcode_format(postcode)

    # International

    def international_autocomplete(
        self, context: str, term: str, session: str, language: str | None = None
    ) -> ApiResult:
        validate_session_value(session)
        params = [context, term]
        if language is not None:
            params.append(language)
        return self._get(build_path("international/v1/autocomplete", *params), session=session)

    def international_get_details(self, context: str, session: str) -> ApiResult:
        validate_session_value(session)
        return self._get(build_path("international/v1/address", context), session=session)

    def international_get_supported_countries(self) -> ApiResult:
        return self._get("international/v1/supported-countries")

    def validate(
        self,
        country: str,
        postcode: str | None = None,
        locality: str | None = None,
        street: str | None = None,
        building: str | None = None,
        region: str | None = None,
        street_and_building: str | None = None,
    ) -> ApiResult:
        query = build_query({
            "postcode": postcode,
            "locality": locality,
            "street": street,
            "building": building,
            "region": region,
            "streetAndBuilding": street_and_building,
        })
        path = build_path("international/v1/validate", country)
        if query:
            path = f"{path}?{query}"
        return self._get(path)

    def get_country(self, country: str) -> ApiResult:
        return self._get(build_path("international/v1/country", country))

    # Dutch addresses

    def dutch_address_by_postcode(
        self, postcode: str, house_number: int, house_number_addition: str | None = None
    ) -> ApiResult:
        postcode = _checked_postcode(postcode)
        parts: List[Any] = [postcode, house_number]
        if house_number_addition is not None:
            parts.append(house_number_addition)
        return self._get(build_path("nl/v1/addresses/postcode", *parts))

    def dutch_address_exact_match(
        self, city: str, street: str, house_number: int, house_number_addition: str = ""
    ) -> ApiResult:
        return self._get(build_path(
            "nl/v1/addresses/exact", city, street, house_number, house_number_addition))

    def dutch_address_rd(self, rd_x: float, rd_y: float) -> ApiResult:
        return self._get(build_path("nl/v1/addresses/rd", rd_x, rd_y))

    def dutch_address_lat_lon(self, latitude: float, longitude: float) -> ApiResult:
        return self._get(build_path("nl/v1/addresses/latlon", latitude, longitude))

    def dutch_address_bag_number_designation(self, bag_number_designation_id: str) -> ApiResult:
        return self._get(build_path(
            "nl/v1/addresses/bag/number-designation", bag_number_designation_id))

    def dutch_address_bag_addressable_object(self, bag_addressable_object_id: str) -> ApiResult:
        return self._get(build_path(
            "nl/v1/addresses/bag/addressable-object", bag_addressable_object_id))

    def dutch_address_postcode_ranges(self, postcode: str) -> ApiResult:
        postcode = _checked_postcode(postcode)
        return self._get(build_path("nl/v1/postcode-ranges/postcode", postcode))

    # Account

    def create_client_account(
        self,
        company_name: str,
        country_iso: str,
        vat_number: str,
        contact_email: str,
        subscription_amount: int,
        site_urls: Sequence[str],
        invoice_email: str,
        invoice_reference: str,
        invoice_address_line1: str,
        invoice_address_line2: str,
        invoice_address_postal_code: str,
        invoice_address_locality: str,
        invoice_address_region: str,
        invoice_address_country_iso: str,
        invoice_contact_name: str | None = None,
        is_test: bool = False,
    ) -> ApiResult:
        fields: Dict[str, Any] = {
            "companyName": company_name,
            "countryIso": country_iso,
            "vatNumber": vat_number,
            "contactEmail": contact_email,
            "subscriptionAmount": subscription_amount,
            "siteUrls": list(site_urls),
            "invoiceEmail": invoice_email,
            "invoiceReference": invoice_reference,
            "invoiceAddressLine1": invoice_address_line1,
            "invoiceAddressLine2": invoice_address_line2,
            "invoiceAddressPostalCode": invoice_address_postal_code,
            "invoiceAddressLocality": invoice_address_locality,
            "invoiceAddressRegion": invoice_address_region,
            "invoiceAddressCountryIso": invoice_address_country_iso,
            "invoiceContactName": invoice_contact_name,
        }
        if is_test:
            fields["isTest"] = True
        return self._post("reseller/v1/client", fields)

    def account_info(self) -> ApiResult:
        return self._get("account/v1/info")

    # Transport

    def _get(self, path: str, *, session: str | None = None) -> ApiResult:
        headers = {SESSION_HEADER_KEY: session} if session is not None else {}
        return self._perform_call("GET", path, headers=headers)

    def _post(self, path: str, fields: Dict[str, Any]) -> ApiResult:
        return self._perform_call("POST", path, data=build_form(fields))

    def _perform_call(
        self,
        method: str,
        path: str,
        *,
        headers: Dict[str, str] | None = None,
        data: Dict[str, Any] | None = None,
    ) -> ApiResult:
        url = self._base_url + path
        hdrs: Dict[str, Any] = {}
        if self.referer:
            hdrs["Referer"] = self.referer.encode("utf-8")
        if headers:
            hdrs.update(headers)
        request_args: Dict[str, Any] = {"headers": hdrs}
        if data is not None:
            request_args["data"] = data

        self._response_headers = {}
        self.last_url = url
        self.last_status_code = None
        # httpx timeouts are per phase, the deadline bounds the whole exchange
        deadline = time.monotonic() + TIMEOUT
        try:
            with self._client.stream(method, url, **request_args) as resp:
                self._capture_headers(resp)
                chunks: List[bytes] = []
                self._check_deadline(deadline, url)
                for chunk in resp.iter_bytes():
                    chunks.append(chunk)
                    self._check_deadline(deadline, url)
                status_code = resp.status_code
                text = b"".join(chunks).decode(resp.encoding or "utf-8", errors="replace")
        except httpx.RequestError as e:
            raise ApiError(
                ErrorKind.TRANSPORT_FAILURE,
                f"Connection error `{type(e).__name__}`: `{e}`.",
                url=url,
                error_code=type(e).__name__,
            ) from e
        self.last_status_code = status_code
        logger.debug("%s %s -> %s", method, url, status_code)
        return interpret_response(status_code, text, url)

    @staticmethod
    def _check_deadline(deadline: float, url: str) -> None:
        if time.monotonic() > deadline:
            raise ApiError(
                ErrorKind.TRANSPORT_FAILURE,
                f"Connection error `Timeout`: no complete response within {TIMEOUT:g} seconds.",
                url=url,
                error_code="Timeout",
            )

    def _capture_headers(self, resp: httpx.Response) -> None:
        captured: Dict[str, List[str]] = {}
        for raw_name, raw_value in resp.headers.raw:
            name = raw_name.decode("latin-1").strip().lower()
            if not name:
                continue
            captured.setdefault(name, []).append(raw_value.decode("latin-1").strip())
        self._response_headers = captured

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False


__all__ = [
    "Client",
    "SERVER_URL",
    "SESSION_HEADER_KEY",
    "is_valid_dutch_postcode_format",
    "validate_session_value",
]
