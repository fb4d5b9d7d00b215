# Copyright 2021 The NATS Authors
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, NoReturn, Optional


class Error(Exception):
    """
    Base class for every error raised by jsconsumer.
    """

    def __init__(self, description: Optional[str] = None) -> None:
        self.description = description

    def __str__(self) -> str:
        desc = ''
        if self.description:
            desc = self.description
        return f"jsconsumer: {self.__class__.__name__} {desc}"


class FieldError(Error):
    """
    An error tied to one field of a consumer configuration.
    """

    def __init__(
        self,
        description: Optional[str] = None,
        field: Optional[str] = None,
        value: Any = None,
    ) -> None:
        self.description = description
        self.field = field
        self.value = value


class DecodeError(FieldError):
    """
    Raised when a server document cannot be turned into a consumer
    configuration: invalid JSON, wrong shape or a field of the wrong type.
    """

    def __str__(self) -> str:
        if self.field is None:
            return f"jsconsumer: decode error: {self.description}"
        return (
            f"jsconsumer: decode error on '{self.field}': {self.description}"
        )


class EncodeError(FieldError):
    """
    Raised when a configuration holds a value the wire format cannot carry.
    """

    def __str__(self) -> str:
        if self.field is None:
            return f"jsconsumer: encode error: {self.description}"
        return (
            f"jsconsumer: encode error on '{self.field}': {self.description}"
        )


class InvalidPolicyError(DecodeError):
    """
    Raised when a policy field holds a value outside of its vocabulary.
    """

    def __str__(self) -> str:
        return (
            f"jsconsumer: invalid value {self.value!r} for '{self.field}'"
        )


@dataclass
class APIError(Error):
    """
    An error reported by the JetStream API in a response payload.
    """
    code: Optional[int]
    err_code: Optional[int]
    description: Optional[str]

    def __init__(
        self,
        code: Optional[int] = None,
        description: Optional[str] = None,
        err_code: Optional[int] = None,
    ) -> None:
        self.code = code
        self.err_code = err_code
        self.description = description

    @classmethod
    def from_error(cls, err: Dict[str, Any]) -> NoReturn:
        code = err.get('code')
        params = {
            'code': code,
            'description': err.get('description'),
            'err_code': err.get('err_code'),
        }
        if code == 503:
            raise ServiceUnavailableError(**params)
        elif code == 500:
            raise ServerError(**params)
        elif code == 404:
            raise NotFoundError(**params)
        elif code == 400:
            raise BadRequestError(**params)
        else:
            raise APIError(**params)

    def __str__(self) -> str:
        return (
            f"jsconsumer: {type(self).__name__}: code={self.code} err_code={self.err_code} "
            f"description='{self.description}'"
        )


class ServiceUnavailableError(APIError):
    """
    A 503 error
    """
    pass


class ServerError(APIError):
    """
    A 500 error
    """
    pass


class NotFoundError(APIError):
    """
    A 404 error
    """
    pass


class BadRequestError(APIError):
    """
    A 400 error
    """
    pass
