"""GraphQL documents sent to the start.gg API."""

from __future__ import annotations

from typing import Final

TOURNAMENTS_PER_PAGE: Final = 500
ENTRANTS_PER_PAGE: Final = 332

# Singles only.
EVENT_TYPE_SINGLES: Final = 1

TOURNAMENTS_QUERY: Final = """
  query TournamentsQuery($page: Int, $perPage: Int, $afterDate: Timestamp, $videogameIds: [ID], $eventTypes: [Int]) {
    tournaments(
      query: {
        page: $page
        perPage: $perPage
        sortBy: "startAt asc"
        filter: {past: true, videogameIds: $videogameIds, afterDate: $afterDate}
      }
    ) {
      pageInfo {
        totalPages
      }
      nodes {
        slug
        name
        startAt
        events(filter: {type: $eventTypes, videogameId: $videogameIds}) {
          id
          name
        }
      }
    }
  }
"""

EVENT_PHASE_GROUPS_QUERY: Final = """
  query EventPhaseGroupsQuery($id: ID) {
    event(id: $id) {
      phaseGroups {
        id
        state
        phase {
          phaseOrder
        }
      }
    }
  }
"""

EVENT_PARTICIPANTS_QUERY: Final = """
  query EventParticipantsQuery($id: ID, $page: Int, $perPage: Int) {
    event(id: $id) {
      entrants(query: {page: $page, perPage: $perPage}) {
        pageInfo {
          totalPages
        }
        nodes {
          id
          participants {
            player {
              id
              gamerTag
              user {
                slug
                genderPronoun
              }
            }
          }
        }
      }
    }
  }
"""

PHASE_GROUP_EXPANDS: Final = ("sets", "seeds", "entrants")
