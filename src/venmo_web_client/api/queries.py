from __future__ import annotations


FUNDING_INSTRUMENTS_OPERATION = "getUserFundingInstruments"

FUNDING_INSTRUMENTS_QUERY = """
  query getUserFundingInstruments {
    profile {
      ... on Profile {
        identity {
          ... on Identity {
            capabilities
            __typename
          }
          __typename
        }
        wallet {
          id
          assets {
            logoThumbnail
            __typename
          }
          instrumentType
          name
          fees {
            feeType
            fixedAmount
            variablePercentage
            __typename
          }
          metadata {
            ...BalanceMetadata
            ... on BankFundingInstrumentMetadata {
              bankName
              isVerified
              lastFourDigits
              uniqueIdentifier
              __typename
            }
            ... on CardFundingInstrumentMetadata {
              issuerName
              lastFourDigits
              networkName
              isVenmoCard
              expirationDate
              expirationStatus
              quasiCash
              __typename
            }
            __typename
          }
          roles {
            merchantPayments
            peerPayments
            __typename
          }
          __typename
        }
        __typename
      }
      __typename
    }
  }

  fragment BalanceMetadata on BalanceFundingInstrumentMetadata {
    availableBalance {
      value
      transactionType
      displayString
      __typename
    }
    __typename
  }
"""

PEOPLE_OPERATION = "People"

PEOPLE_QUERY = """
  query People($input: SearchInput!) {
    search(input: $input) {
      people {
        edges {
          node {
            displayName
            id
            type
            avatar {
              url
            }
            handle
            firstName
            lastName
            isFriend
          }
        }
      }
    }
  }
"""
