"""
Demo proposals for a fresh dashboard.

Windows are relative to ``now`` so the set always shows a mix of active,
executed and defeated proposals. Tallies are token amounts in wei.
"""

from typing import List

from govdash_node.governance.models import Proposal, ProposalAction

DAY = 86400
WEI = 10**18


def demo_proposals(now: int) -> List[Proposal]:
    return [
        Proposal(
            id=1,
            title="Add Support for Arbitrum Network",
            description=(
                "Proposal to add Arbitrum network support to SynergyAI, allowing users "
                "to deploy and interact with contracts on Arbitrum."
            ),
            proposer="0x1234567890123456789012345678901234567890",
            start_time=now - 5 * DAY,
            end_time=now + 2 * DAY,
            for_votes=15000 * WEI,
            against_votes=5000 * WEI,
            proposal_type="integration",
            actions=[
                ProposalAction(
                    target="0x1234567890123456789012345678901234567890",
                    signature="addSupportedNetwork(uint256,string)",
                )
            ],
            created_at=now - 6 * DAY,
            transaction_hash="0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef",
        ),
        Proposal(
            id=2,
            title="Increase Compute Task Reward Pool by 20%",
            description=(
                "Proposal to increase the reward pool for compute providers by 20% to "
                "incentivize more nodes to join the network."
            ),
            proposer="0x2345678901234567890123456789012345678901",
            start_time=now - 10 * DAY,
            end_time=now - 3 * DAY,
            for_votes=25000 * WEI,
            against_votes=12000 * WEI,
            executed=True,
            proposal_type="parameter",
            actions=[
                ProposalAction(
                    target="0x2345678901234567890123456789012345678901",
                    signature="setRewardMultiplier(uint256)",
                )
            ],
            created_at=now - 11 * DAY,
            transaction_hash="0x2345678901abcdef2345678901abcdef2345678901abcdef2345678901abcdef",
        ),
        Proposal(
            id=3,
            title="Implement ZK-STARK Verification for Task Results",
            description=(
                "Proposal to implement ZK-STARK verification for compute task results to "
                "enhance trust and accuracy of computation proofs."
            ),
            proposer="0x3456789012345678901234567890123456789012",
            start_time=now - 2 * DAY,
            end_time=now + 5 * DAY,
            for_votes=8000 * WEI,
            against_votes=7000 * WEI,
            proposal_type="upgrade",
            actions=[
                ProposalAction(
                    target="0x3456789012345678901234567890123456789012",
                    signature="upgradeToVersion(string)",
                )
            ],
            created_at=now - 3 * DAY,
            transaction_hash="0x3456789012abcdef3456789012abcdef3456789012abcdef3456789012abcdef",
        ),
        Proposal(
            id=4,
            title="Update SYN Token Staking Rewards Formula",
            description=(
                "Proposal to update the SYN token staking rewards formula to better align "
                "incentives with network growth and usage."
            ),
            proposer="0x4567890123456789012345678901234567890123",
            start_time=now - 7 * DAY,
            end_time=now - 1 * DAY,
            for_votes=18000 * WEI,
            against_votes=22000 * WEI,
            proposal_type="parameter",
            actions=[
                ProposalAction(
                    target="0x4567890123456789012345678901234567890123",
                    signature="updateRewardFormula(uint256,uint256,uint256)",
                )
            ],
            created_at=now - 8 * DAY,
            transaction_hash="0x4567890123abcdef4567890123abcdef4567890123abcdef4567890123abcdef",
        ),
        Proposal(
            id=5,
            title="Treasury Diversification Strategy",
            description=(
                "Proposal to diversify treasury holdings across multiple stable assets to "
                "reduce volatility risks."
            ),
            proposer="0x5678901234567890123456789012345678901234",
            start_time=now - 3 * DAY,
            end_time=now + 7 * DAY,
            for_votes=12000 * WEI,
            against_votes=3000 * WEI,
            proposal_type="funding",
            actions=[
                ProposalAction(
                    target="0x5678901234567890123456789012345678901234",
                    signature="allocateFunds(address[],uint256[])",
                )
            ],
            created_at=now - 4 * DAY,
            transaction_hash="0x5678901234abcdef5678901234abcdef5678901234abcdef5678901234abcdef",
        ),
    ]
