"""
Example: Building and running OData queries with c4c_odata
==========================================================
"""

from datetime import datetime, timedelta, timezone

from c4c_odata import ODataAuth, ODataConfig, ODataSession
from c4c_odata.odata import ODataFilter, ODataQueryParam, ODataService


def example_build_filter():
    """Build a $filter and a query string without any backend."""
    now = datetime.now(timezone.utc)

    f = ODataFilter.new_filter()
    f.field("StatusCode").in_(["1", "2"])
    f.field("CreationDateTime").between_date_time_offset(now - timedelta(days=30), now)
    f.field("OwnerPartyID").ne(None)

    print("$filter:", f.build())

    param = (
        ODataQueryParam.new_param()
        .filter(f)
        .select(["ObjectID", "Name", "StatusCode"])
        .orderby("CreationDateTime", "desc")
        .top(50)
        .inlinecount(True)
    )
    print("query:", param)


def example_query():
    """Run a query against a C4C tenant."""
    cfg = ODataConfig(
        base_url="https://my000000.crm.ondemand.com/sap/c4c/odata/v1/",
        auth=ODataAuth("basic", ("USER", "PASSWORD")),
    )

    with ODataSession(cfg) as sess:
        api = ODataService(sess, "c4codataapi")
        leads = api.query(
            "LeadCollection",
            ODataQueryParam().filter(ODataFilter().field("StatusCode").eq("2")).top(20),
            max_pages=2,
        )
        print(f"Found {len(leads)} leads")


def example_connection_context():
    """Using ConnectionContext with C4C_* environment variables."""
    from c4c_odata import ConnectionContext

    with ConnectionContext() as conn:
        api = conn.get_service("c4codataapi")
        print(api.count("LeadCollection", ODataQueryParam().inlinecount(True).top(1)))


if __name__ == "__main__":
    example_build_filter()
    # example_query()
    # example_connection_context()
