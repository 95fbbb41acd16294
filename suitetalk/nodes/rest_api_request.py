from suitetalk.nodes.base import RequestNode


class NetSuiteRestApiRequest(RequestNode):
    """Record API node: GET/POST/PUT/DELETE against /record/v1/{object}/{id|eid:externalId}."""

    name = "netsuite-rest-api-request"

    async def run(self, fields):
        return await self.engine.execute_record(self.config, fields)
