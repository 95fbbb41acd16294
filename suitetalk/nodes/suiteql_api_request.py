from suitetalk.nodes.base import RequestNode, normalize_fields


class NetSuiteSuiteQLApiRequest(RequestNode):
    """SuiteQL node: POSTs the query payload, emits the raw response data."""

    name = "netsuite-suiteql-api-request"

    def message_fields(self, msg):
        fields = normalize_fields(msg.get("payload"))
        if msg.get("url") and not fields.get("url"):
            fields["url"] = msg["url"]
        return fields

    async def run(self, fields):
        return await self.engine.execute_suiteql(self.config, fields)

    def success_payload(self, outcome):
        return outcome.data

    def error_payload(self, outcome):
        # NetSuite answered: keep its status and body for the flow
        error = super().error_payload(outcome)
        if outcome.status_code is not None:
            error["statusCode"] = outcome.status_code
            error["data"] = outcome.raw_body
        return error
