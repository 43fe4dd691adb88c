import argparse
import logging
import random
import secrets
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from commitment import PedersenCommitment
from config import SystemConfig, load_config
from election import (
    DuplicateNullifierError,
    Election,
    ElectionClosedError,
    Vote,
    VoteSubmissionError,
)
from gf import Scalar
from utils import PerformanceMonitor, create_performance_report, save_results, setup_logging

logger = logging.getLogger(__name__)

CREDENTIAL_BYTES = 32


class ElectionOrchestrator:
    """Drives one simulated election end to end"""

    def __init__(self, config: SystemConfig):
        self.config = config
        self.key = config.election.commitment_key()
        self.performance_monitor = PerformanceMonitor()
        self.rng = random.Random(config.election.seed)
        self.results: Dict[str, Any] = {
            'election': {},
            'tally': {},
            'performance_metrics': {},
            'integrity_checks': {}
        }

        logger.info("Initialized Election Orchestrator")

    def register_voters(self, num_voters: int) -> List[bytes]:
        """Issue one random credential per voter; the roster is their ordered list"""
        return [secrets.token_bytes(CREDENTIAL_BYTES) for _ in range(num_voters)]

    def create_election(self, roster: List[bytes]) -> Election:
        with self.performance_monitor.start_operation("create_election"):
            return Election(self.config.election.election_id_bytes(), roster, self.key)

    def cast_ballot(self, election: Election, voter_index: int, vote: int) -> Tuple[Vote, Scalar]:
        """Build and submit one ballot, returning it with its blinding factor"""
        blinding = Scalar.random()
        nullifier_secret = Scalar.random()
        eligibility_proof = election.eligibility_proof(voter_index)

        with self.performance_monitor.start_operation("build_vote"):
            ballot = election.build_vote(vote, blinding, nullifier_secret, eligibility_proof)

        with self.performance_monitor.start_operation("submit_vote"):
            election.submit_vote(ballot)

        return ballot, blinding

    def run_election(self, num_voters: int, negative_checks: bool = True) -> Dict[str, Any]:
        logger.info(f"Starting election with {num_voters} voters")
        election_start = time.time()

        roster = self.register_voters(num_voters)
        election = self.create_election(roster)

        votes = [self.rng.randint(0, 1) for _ in range(num_voters)]
        ballots: List[Vote] = []
        sum_blinding = Scalar.zero()
        for voter_index, vote in enumerate(votes):
            ballot, blinding = self.cast_ballot(election, voter_index, vote)
            ballots.append(ballot)
            sum_blinding = sum_blinding + blinding

        checks: Dict[str, bool] = {}
        if negative_checks:
            checks['replay_rejected'] = self._expect_rejection(
                election, ballots[0], DuplicateNullifierError)

        election.close()

        if negative_checks:
            late_ballot = election.build_vote(
                0, Scalar.random(), Scalar.random(), election.eligibility_proof(0))
            checks['late_vote_rejected'] = self._expect_rejection(
                election, late_ballot, ElectionClosedError)

        with self.performance_monitor.start_operation("open_tally"):
            opened = election.open_tally(sum_blinding)

        election_time = time.time() - election_start
        expected = sum(votes)

        checks.update(self._perform_integrity_checks(election, opened, expected))
        checks['all_checks_passed'] = all(checks.values())

        self.results['election'] = {
            'election_id': self.config.election.election_id,
            'eligible_voters': len(election.eligibility_tree),
            'accepted_votes': election.num_accepted(),
            'status': election.status,
            'eligibility_root': election.eligibility_root,
            'tally_commitment': election.tally
        }
        self.results['tally'] = {'opened': opened, 'expected': expected}
        self.results['performance_metrics'] = {
            'total_voters': num_voters,
            'accepted_votes': election.num_accepted(),
            'total_election_time': election_time,
            'throughput_votes_per_second': num_voters / election_time if election_time > 0 else 0.0
        }
        self.results['integrity_checks'] = checks

        logger.info(f"Election completed in {election_time:.3f}s")
        logger.info(f"Opened tally: {opened} (expected {expected})")

        return self.results

    def _expect_rejection(self, election: Election, ballot: Vote, error_type) -> bool:
        try:
            election.submit_vote(ballot)
        except error_type:
            return True
        except VoteSubmissionError as e:
            logger.error(f"Vote rejected for the wrong reason: {e.kind.value}")
            return False
        logger.error("Vote unexpectedly accepted")
        return False

    def _perform_integrity_checks(self, election: Election, opened: Optional[int], expected: int) -> Dict[str, bool]:
        checks = {}

        checks['tally_opens_to_plaintext_sum'] = opened == expected

        checks['audit_log_proofs_verify'] = all(
            ballot.proof.verify(self.key, ballot.commitment, election.election_id)
            for ballot in election.accepted_votes
        )

        nullifiers = [ballot.nullifier for ballot in election.accepted_votes]
        checks['nullifiers_unique'] = len(set(nullifiers)) == len(nullifiers)

        recomputed = PedersenCommitment.identity()
        for ballot in election.accepted_votes:
            recomputed = recomputed + ballot.commitment
        checks['tally_matches_audit_log'] = recomputed == election.tally

        return checks


def run_demo(config: SystemConfig, num_voters: int) -> bool:
    print("=" * 80)
    print("ANONYMOUS VOTING TOOLKIT - DEMONSTRATION")
    print("   Pedersen commitments + Merkle eligibility + OR-proofs + nullifiers")
    print("=" * 80)

    orchestrator = ElectionOrchestrator(config)

    try:
        results = orchestrator.run_election(num_voters, negative_checks=True)
    except (VoteSubmissionError, ValueError) as e:
        logger.error(f"Demo failed: {e}", exc_info=True)
        print(f"\n Demo failed: {e}")
        return False

    print(f"\nElection: {results['election']['election_id']}")
    print(f"  Eligible voters: {results['election']['eligible_voters']}")
    print(f"  Accepted votes: {results['election']['accepted_votes']}")
    print(f"  Opened tally: {results['tally']['opened']} (expected {results['tally']['expected']})")

    print("\nIntegrity Checks:")
    for check, passed in results['integrity_checks'].items():
        status = " PASSED" if passed else " FAILED"
        print(f"  {check}: {status}")

    report_path = config.results_dir / "election_report.json"
    save_results(results, report_path)

    perf_path = config.results_dir / "performance_report.txt"
    with open(perf_path, "w") as f:
        f.write(create_performance_report(orchestrator.performance_monitor))

    print(f"\nFull results saved to: {report_path}")
    print(f"Performance report: {perf_path}")

    return results['integrity_checks']['all_checks_passed']


def run_benchmark(config: SystemConfig, num_voters: int) -> bool:
    orchestrator = ElectionOrchestrator(config)
    results = orchestrator.run_election(num_voters, negative_checks=False)

    report = create_performance_report(orchestrator.performance_monitor)
    print(report)

    if config.enable_benchmarking:
        orchestrator.performance_monitor.save_metrics(
            config.results_dir / "benchmark_metrics.json")

    return results['integrity_checks']['all_checks_passed']


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description='Anonymous Voting Toolkit')
    parser.add_argument('--voters', type=int, default=None,
                        help='Number of voters (defaults to the config value)')
    parser.add_argument('--config', type=str,
                        default='config.yaml', help='Config file path')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the simulated vote values')
    parser.add_argument(
        '--mode', choices=['demo', 'benchmark'], default='demo')

    args = parser.parse_args(argv)

    config = load_config(Path(args.config))
    if args.seed is not None:
        config.election.seed = args.seed
    num_voters = args.voters if args.voters is not None else config.election.num_voters
    if num_voters < 1:
        parser.error("--voters must be at least 1")

    setup_logging(config.log_level, log_dir=config.log_dir)

    if args.mode == 'demo':
        success = run_demo(config, num_voters)
    else:
        success = run_benchmark(config, num_voters)

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
