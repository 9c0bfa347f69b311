"""SQLAlchemy catalog store.

Maps the partitioned key-value contract onto one relational table with a
composite primary key (tenant_id, codigo). Pagination is keyset based: the
last returned codigo is the exclusive start of the next page.
"""

from typing import Any

import structlog
from sqlalchemy import Table, and_, delete, func, insert, or_, select, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.catalog.models import Producto
from app.catalog.store import Page, ProductFilter, QueryOptions
from app.domain.exceptions import ProductAlreadyExistsError, ProductNotFoundError
from app.infrastructure.database import get_session_factory
from app.infrastructure.models import metadata, productos_table

logger = structlog.get_logger()


class SqlAlchemyCatalogStore:
    """Catalog store backed by an async SQLAlchemy engine.

    Example usage:
        store = SqlAlchemyCatalogStore(get_engine(), table_name="productos")
        await store.create_schema()
        page = await store.query(
            "acme",
            QueryOptions(limit=20, filter=ProductFilter(categoria="Analgésicos")),
        )
    """

    def __init__(self, engine: AsyncEngine, table_name: str = "productos") -> None:
        """Initialize store.

        Args:
            engine: Async engine.
            table_name: Name of the products table.
        """
        self.engine = engine
        self.table: Table = productos_table(table_name)
        self._session_factory: async_sessionmaker[AsyncSession] = get_session_factory(engine)

    async def create_schema(self) -> None:
        """Create the products table if it does not exist."""
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all, tables=[self.table])
        logger.info("Catalog table ready", table=self.table.name)

    async def get(self, tenant_id: str, codigo: str) -> Producto | None:
        """Get product by primary key.

        Args:
            tenant_id: Partition key.
            codigo: Sort key.

        Returns:
            Product if found, None otherwise.
        """
        async with self._session_factory() as session:
            return await self._get(session, tenant_id, codigo)

    async def put(self, producto: Producto, *, overwrite: bool = True) -> None:
        """Write a whole product.

        Args:
            producto: Product to store.
            overwrite: Replace an existing item with the same key.

        Raises:
            ProductAlreadyExistsError: If overwrite is False and the key exists.
        """
        values = producto.to_dict()
        async with self._session_factory() as session:
            if overwrite:
                await session.execute(
                    delete(self.table).where(self._key_clause(producto.tenant_id, producto.codigo))
                )
            try:
                await session.execute(insert(self.table).values(**values))
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise ProductAlreadyExistsError(producto.tenant_id, producto.codigo) from e

    async def update(self, tenant_id: str, codigo: str, patch: dict[str, Any]) -> Producto:
        """Apply a partial update and return the post-image.

        Args:
            tenant_id: Partition key.
            codigo: Sort key.
            patch: Field → value mapping. Key fields are ignored.

        Returns:
            Updated product.

        Raises:
            ProductNotFoundError: If the item does not exist.
        """
        values = {k: v for k, v in patch.items() if k not in ("tenant_id", "codigo")}
        async with self._session_factory() as session:
            if values:
                result = await session.execute(
                    update(self.table)
                    .where(self._key_clause(tenant_id, codigo))
                    .values(**values)
                )
                if result.rowcount == 0:
                    await session.rollback()
                    raise ProductNotFoundError(codigo)

            producto = await self._get(session, tenant_id, codigo)
            if producto is None:
                await session.rollback()
                raise ProductNotFoundError(codigo)

            await session.commit()
            return producto

    async def delete(self, tenant_id: str, codigo: str) -> Producto | None:
        """Delete a product.

        Args:
            tenant_id: Partition key.
            codigo: Sort key.

        Returns:
            The deleted product, or None if it did not exist.
        """
        async with self._session_factory() as session:
            producto = await self._get(session, tenant_id, codigo)
            if producto is None:
                return None
            await session.execute(delete(self.table).where(self._key_clause(tenant_id, codigo)))
            await session.commit()
            return producto

    async def query(self, tenant_id: str, options: QueryOptions) -> Page:
        """Query one tenant partition with filtering and keyset pagination.

        Args:
            tenant_id: Partition to read.
            options: Limit, start key, direction and filter.

        Returns:
            Page of matching products.
        """
        t = self.table
        conditions = [t.c.tenant_id == tenant_id, *self._filter_conditions(options.filter)]

        if options.start_key is not None:
            start = options.start_key["codigo"]
            conditions.append(t.c.codigo > start if options.ascending else t.c.codigo < start)

        query = select(t).where(and_(*conditions))
        query = query.order_by(t.c.codigo.asc() if options.ascending else t.c.codigo.desc())

        # One extra row tells whether another page exists
        if options.limit is not None:
            query = query.limit(options.limit + 1)

        async with self._session_factory() as session:
            result = await session.execute(query)
            rows = result.mappings().all()

        items = [Producto.model_validate(dict(row)) for row in rows]
        if options.limit is not None and len(items) > options.limit:
            items = items[: options.limit]
            return Page(items=items, last_key=items[-1].key if items else None)
        return Page(items=items)

    async def ping(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception as e:
            logger.warning("Catalog store unreachable", error=str(e))
            return False
        return True

    async def _get(self, session: AsyncSession, tenant_id: str, codigo: str) -> Producto | None:
        result = await session.execute(
            select(self.table).where(self._key_clause(tenant_id, codigo))
        )
        row = result.mappings().one_or_none()
        return Producto.model_validate(dict(row)) if row is not None else None

    def _key_clause(self, tenant_id: str, codigo: str) -> Any:
        return and_(self.table.c.tenant_id == tenant_id, self.table.c.codigo == codigo)

    def _filter_conditions(self, filters: ProductFilter) -> list[Any]:
        """Translate a ProductFilter into SQL conditions.

        Args:
            filters: Predicate; unset fields are skipped.

        Returns:
            List of SQLAlchemy boolean clauses.
        """
        t = self.table
        conditions: list[Any] = []

        if filters.categoria is not None:
            conditions.append(t.c.categoria == filters.categoria)

        if filters.subcategoria is not None:
            conditions.append(t.c.subcategoria == filters.subcategoria)

        if filters.laboratorio is not None:
            conditions.append(t.c.laboratorio.contains(filters.laboratorio, autoescape=True))

        if filters.requiere_receta is not None:
            conditions.append(t.c.requiere_receta == filters.requiere_receta)

        if filters.precio_min is not None:
            conditions.append(t.c.precio >= filters.precio_min)

        if filters.precio_max is not None:
            conditions.append(t.c.precio <= filters.precio_max)

        if filters.search is not None:
            conditions.append(
                or_(
                    t.c.nombre.contains(filters.search, autoescape=True),
                    t.c.descripcion.contains(filters.search, autoescape=True),
                )
            )

        if filters.termino is not None:
            termino = filters.termino.lower()
            conditions.append(
                or_(
                    *(
                        func.lower(column).contains(termino, autoescape=True)
                        for column in (
                            t.c.nombre,
                            t.c.descripcion,
                            t.c.categoria,
                            t.c.subcategoria,
                            t.c.laboratorio,
                        )
                    )
                )
            )

        if filters.activo is not None:
            conditions.append(t.c.activo == filters.activo)

        return conditions
