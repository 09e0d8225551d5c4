from aws_cdk import RemovalPolicy
from aws_cdk import aws_dynamodb as dynamodb
from constructs import Construct


def _string_attribute(name: str) -> dynamodb.Attribute:
    return dynamodb.Attribute(name=name, type=dynamodb.AttributeType.STRING)


class Database(Construct):
    """DynamoDB Construct

    - GSI1: 作成日時の降順一覧
    - GSI2: booking_id による検索
    - GSI3: プロバイダ注文IDによる検索（疎インデックス）
    """

    def __init__(self, scope: Construct, id: str) -> None:
        super().__init__(scope, id)

        self.table = dynamodb.Table(
            self,
            "BookingTable",
            partition_key=_string_attribute("PK"),
            sort_key=_string_attribute("SK"),
            billing_mode=dynamodb.BillingMode.PAY_PER_REQUEST,
            removal_policy=RemovalPolicy.RETAIN,
        )

        self.table.add_global_secondary_index(
            index_name="GSI1",
            partition_key=_string_attribute("GSI1PK"),
            sort_key=_string_attribute("GSI1SK"),
        )
        self.table.add_global_secondary_index(
            index_name="GSI2",
            partition_key=_string_attribute("GSI2PK"),
        )
        self.table.add_global_secondary_index(
            index_name="GSI3",
            partition_key=_string_attribute("GSI3PK"),
        )
