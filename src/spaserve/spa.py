"""Single-page-app fallback policy.

The innermost handler of the pipeline. Decides per request between
the root document, a static asset, or a 404:

1. ``/`` and ``/index.html`` -> root document, never cached
2. asset-shaped path found in the tree -> the asset, cached for a year
3. anything else -> root document again, so client-side routing
   takes over
4. root document missing -> 404

Missing asset-shaped paths (``/missing.png``) take the step 3 route by
default. ``strict_assets=True`` makes them 404 instead.
"""

from __future__ import annotations

import logging

from spaserve.assets import AssetTree, is_asset_path
from spaserve.config import ServerConfig
from spaserve.errors import AssetNotFound, MethodNotAllowed, NotFound
from spaserve.http.conditional import serve_asset
from spaserve.http.request import Request
from spaserve.http.response import Response

logger = logging.getLogger("spaserve.spa")

ALLOWED_METHODS = frozenset({"GET", "HEAD"})


class SPAFallback:
    """Serve assets from an ``AssetTree`` with root-document fallback.

    Usage::

        tree = AssetTree.from_directory("dist")
        policy = SPAFallback(tree)
        response = await policy(request)
    """

    __slots__ = (
        "asset_cache_control",
        "assets",
        "document_cache_control",
        "index",
        "strict_assets",
    )

    def __init__(
        self,
        assets: AssetTree,
        *,
        index: str = "index.html",
        asset_cache_control: str = "public, max-age=31536000, immutable",
        document_cache_control: str = "no-store",
        strict_assets: bool = False,
    ) -> None:
        self.assets = assets
        self.index = index.lstrip("/")
        self.asset_cache_control = asset_cache_control
        self.document_cache_control = document_cache_control
        self.strict_assets = strict_assets

    @classmethod
    def from_config(cls, assets: AssetTree, config: ServerConfig) -> SPAFallback:
        return cls(
            assets,
            index=config.index,
            asset_cache_control=config.asset_cache_control,
            document_cache_control=config.document_cache_control,
            strict_assets=config.strict_assets,
        )

    async def __call__(self, request: Request) -> Response:
        if request.method not in ALLOWED_METHODS:
            raise MethodNotAllowed(ALLOWED_METHODS)

        path = request.clean_path
        if path in ("/", f"/{self.index}"):
            logger.debug("%s %s -> root document", request.method, path)
            return self._document()

        if is_asset_path(path):
            try:
                asset = self.assets.open(path)
            except AssetNotFound:
                if self.strict_assets:
                    raise
                logger.debug("%s %s -> missing asset, root document", request.method, path)
            else:
                logger.debug("%s %s -> asset %s", request.method, path, asset.name)
                return serve_asset(
                    request,
                    asset,
                    (("Cache-Control", self.asset_cache_control),),
                )
        else:
            logger.debug("%s %s -> route, root document", request.method, path)

        return self._document()

    def _document(self) -> Response:
        try:
            document = self.assets.open(self.index)
        except AssetNotFound as exc:
            raise NotFound(f"{self.index} not found") from exc
        return Response(
            body=document.data,
            content_type="text/html; charset=utf-8",
            headers=(("Cache-Control", self.document_cache_control),),
        )
